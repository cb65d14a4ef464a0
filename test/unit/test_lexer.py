"""
Unit tests for the lexical scanner
"""

import unittest

from cppx.core.lexer import Lexer, scan
from cppx.core.tokens import TokenKind
from cppx.errors import (
    ScanError, UnterminatedLiteral, UnterminatedComment, MalformedEscape,
    UnbalancedBrace, UnbalancedParenthesis, EmptyCharLiteral,
)


def classified(source):
    """(kind, text) pairs for every token except the EOF sentinel"""
    if isinstance(source, str):
        source = source.encode('utf-8')
    return [(t.kind, t.text(source)) for t in scan(source)[:-1]]


def of_kind(source, kind):
    return [text for k, text in classified(source) if k == kind]


SAMPLES = [
    b"",
    b"int x;",
    b"// banner\n#include <vector>\n\nnamespace A {\nclass B {\npublic:\n    B() : x(1), y{2} {}\n"
    b"    ~B() { }\n    int f(int a) const { return a * 2; }\nprivate:\n    int x, y;\n};\n}\n",
    b"const char* s = \"a\\\"b\\n\"; char c = '\\x41'; auto r = R\"(raw\n)\";\n",
    b"#define X /* open\n close */\nint a = 0x1F + 1'000;\n",
    b"enum class Color { Red, Green };\nstruct P { int a; };\n",
    b"\xc3\xa9t\xc3\xa9 = 1; /* caf\xc3\xa9 */ @ $ ?\n",
]


class TestLossless(unittest.TestCase):
    """Test that token spans reproduce the input exactly"""

    def test_spans_reproduce_source(self):
        for source in SAMPLES:
            with self.subTest(source=source):
                tokens = scan(source)
                self.assertEqual(b''.join(t.raw(source) for t in tokens), source)

    def test_spans_are_contiguous(self):
        for source in SAMPLES:
            with self.subTest(source=source):
                tokens = scan(source)
                self.assertEqual(tokens[0].begin, 0)
                for previous, token in zip(tokens, tokens[1:]):
                    self.assertEqual(previous.end + 1, token.begin)

    def test_eof_sentinel(self):
        for source in SAMPLES:
            with self.subTest(source=source):
                eof = scan(source)[-1]
                self.assertEqual(eof.kind, TokenKind.EOF)
                self.assertEqual(eof.begin, len(source))
                self.assertEqual(eof.end, len(source) - 1)

    def test_str_and_memoryview_sources(self):
        text = "class A { void f() {} };"
        self.assertEqual(scan(text), scan(text.encode('utf-8')))
        self.assertEqual(scan(memoryview(text.encode('utf-8'))), scan(text.encode('utf-8')))

    def test_scan_is_cached(self):
        lexer = Lexer(b"int a;")
        self.assertIs(lexer.scan(), lexer.scan())


class TestLiterals(unittest.TestCase):
    """Test char and string literal scanning"""

    def test_char_literals(self):
        source = r"a = 'x'; b = '\n'; c = '\x41'; d = '\101'; e = '\''; f = 'é';"
        self.assertEqual(of_kind(source, TokenKind.CHAR_LITERAL),
                         ["'x'", r"'\n'", r"'\x41'", r"'\101'", r"'\''", r"'é'"])

    def test_short_octal_escape(self):
        self.assertEqual(of_kind(r"c = '\0';", TokenKind.CHAR_LITERAL), [r"'\0'"])

    def test_string_literal(self):
        source = r'const char* s = "say \"hi\"\n";'
        self.assertEqual(of_kind(source, TokenKind.STRING_LITERAL), [r'"say \"hi\"\n"'])

    def test_raw_string_is_one_token(self):
        source = 'auto s = R"DELIM(a)not-end)DELIM";'
        self.assertEqual(of_kind(source, TokenKind.STRING_LITERAL), ['"DELIM(a)not-end)DELIM"'])

    def test_raw_string_spans_lines(self):
        source = 'auto s = R"(line one\n"quoted"\nline two)";\nint x;'
        self.assertEqual(of_kind(source, TokenKind.STRING_LITERAL),
                         ['"(line one\n"quoted"\nline two)"'])

    def test_braces_inside_literals_are_ignored(self):
        """Braces in literals never touch the frame stack"""
        source = 'const char* s = "}}"; char c = \'}\';'
        self.assertEqual(of_kind(source, TokenKind.END_GROUP), [])

    def test_unterminated_string_reports_opening_line(self):
        source = b'int a;\nconst char* s = "abc\nint b;\n'
        with self.assertRaises(UnterminatedLiteral) as cm:
            scan(source)
        self.assertEqual(cm.exception.line, 2)
        self.assertEqual(cm.exception.snippet, '"abc')

    def test_string_at_end_of_file(self):
        with self.assertRaises(UnterminatedLiteral):
            scan(b'"abc')

    def test_invalid_raw_string(self):
        with self.assertRaises(UnterminatedLiteral):
            scan(b'auto s = R"x(never closed')

    def test_empty_char_literal(self):
        with self.assertRaises(EmptyCharLiteral):
            scan(b"char c = '';")

    def test_char_literal_missing_delimiter(self):
        with self.assertRaises(UnterminatedLiteral):
            scan(b"char c = 'ab';")

    def test_malformed_escape(self):
        with self.assertRaises(MalformedEscape):
            scan(rb"char c = '\q';")
        with self.assertRaises(MalformedEscape):
            scan(rb'const char* s = "\xZZ";')

    def test_errors_are_scan_errors(self):
        with self.assertRaises(ScanError):
            scan(b"char c = '';")


class TestCommentsAndDirectives(unittest.TestCase):
    """Test comment and preprocessor directive scanning"""

    def test_consecutive_line_comments_are_one_token(self):
        self.assertEqual(of_kind("// a\n// b\nint x;", TokenKind.COMMENT), ["// a\n// b"])

    def test_block_comment_absorbs_trailing_whitespace(self):
        self.assertEqual(of_kind("/* x */\n\nint y;", TokenKind.COMMENT), ["/* x */\n\n"])

    def test_unterminated_block_comment(self):
        with self.assertRaises(UnterminatedComment) as cm:
            scan(b"int a;\n/* never closed\n")
        self.assertEqual(cm.exception.line, 2)

    def test_division_is_not_a_comment(self):
        self.assertEqual(of_kind("x = a / b;", TokenKind.COMMENT), [])

    def test_directive_includes_newline(self):
        self.assertEqual(of_kind("#include <vector>\nint x;", TokenKind.DIRECTIVE), ["#include <vector>\n"])

    def test_directive_with_closed_comment(self):
        self.assertEqual(of_kind("#define X 1 /* one */\nint x;", TokenKind.DIRECTIVE),
                         ["#define X 1 /* one */"])

    def test_directive_with_open_comment(self):
        """A comment left open at the end of the line becomes its own token"""
        source = "#define X /* a\n b */\nint x;"
        self.assertEqual(of_kind(source, TokenKind.DIRECTIVE), ["#define X "])
        self.assertEqual(of_kind(source, TokenKind.COMMENT), ["/* a\n b */\n"])

    def test_directive_at_end_of_file(self):
        self.assertEqual(of_kind("#pragma once", TokenKind.DIRECTIVE), ["#pragma once"])


class TestStructure(unittest.TestCase):
    """Test frame-driven classification"""

    def test_function_name_and_parameters(self):
        tokens = classified("int f(int a, int b);")
        self.assertIn((TokenKind.FUNCTION_NAME, "f"), tokens)
        self.assertIn((TokenKind.PARAMETERS, "(int a, int b)"), tokens)

    def test_nested_call_in_parameters(self):
        self.assertEqual(of_kind("int f(int a = g(1));", TokenKind.PARAMETERS), ["(int a = g(1))"])
        self.assertEqual(of_kind("int f(int a = g(1));", TokenKind.FUNCTION_NAME), ["f"])

    def test_constructor_recognition(self):
        source = "namespace A { class B { B() : x(1) {} }; }"
        tokens = classified(source)
        self.assertIn((TokenKind.CONSTRUCTOR_DESTRUCTOR, "B"), tokens)
        self.assertEqual(of_kind(source, TokenKind.INITIALIZER_LIST), [": x(1)"])
        self.assertEqual(of_kind(source, TokenKind.FUNCTION_NAME), [])

    def test_initializer_list_with_several_members(self):
        source = "class B { B(int a) : x(a), y(2), z{3} { } int x, y, z; };"
        self.assertEqual(of_kind(source, TokenKind.INITIALIZER_LIST), [": x(a), y(2), z{3}"])

    def test_brace_initializer_does_not_close_class(self):
        source = "namespace A { class B { B() : x{1} {} int y; }; }"
        kinds = [k for k, _ in classified(source)]
        self.assertEqual(kinds.count(TokenKind.BEGIN_GROUP), 3)
        self.assertEqual(kinds.count(TokenKind.END_GROUP), 3)
        self.assertEqual(of_kind(source, TokenKind.INITIALIZER_LIST), [": x{1}"])

    def test_destructor(self):
        tokens = classified("class B { ~B() { } };")
        self.assertIn((TokenKind.CONSTRUCTOR_DESTRUCTOR, "B"), tokens)
        self.assertIn((TokenKind.PASSTHROUGH, "~"), tokens)

    def test_calls_inside_function_are_not_reclassified(self):
        source = "void f() { g(1); if (x) { h(); } }"
        self.assertEqual(of_kind(source, TokenKind.FUNCTION_NAME), ["f"])

    def test_calls_inside_constructor_are_classified(self):
        source = "class B { B() { init(1); } };"
        self.assertEqual(of_kind(source, TokenKind.FUNCTION_NAME), ["init"])
        self.assertEqual(of_kind(source, TokenKind.CONSTRUCTOR_DESTRUCTOR), ["B"])

    def test_constructor_declaration_then_access_modifier(self):
        source = "class A { A(); private: int x; };"
        self.assertEqual(of_kind(source, TokenKind.ACCESS_MODIFIER), ["private:"])
        self.assertEqual(of_kind(source, TokenKind.INITIALIZER_LIST), [])

    def test_access_modifiers(self):
        source = "class A {\npublic:\n  int a;\nprotected :\n  int b;\n};"
        self.assertEqual(of_kind(source, TokenKind.ACCESS_MODIFIER), ["public:", "protected :"])

    def test_base_class_list_is_not_an_initializer(self):
        source = "class A : public B { };"
        self.assertEqual(of_kind(source, TokenKind.INITIALIZER_LIST), [])
        self.assertEqual(of_kind(source, TokenKind.ACCESS_MODIFIER), [])

    def test_qualified_names(self):
        self.assertEqual(of_kind("std::string s;", TokenKind.IDENTIFIER), ["std::string", "s"])
        self.assertEqual(of_kind("a::b::c x;", TokenKind.IDENTIFIER), ["a::b::c", "x"])

    def test_keywords(self):
        tokens = classified("namespace n { struct s; enum e { }; class c; }")
        kinds = {k for k, _ in tokens}
        for kind in (TokenKind.NAMESPACE_KEYWORD, TokenKind.STRUCT_KEYWORD,
                     TokenKind.ENUM_KEYWORD, TokenKind.CLASS_KEYWORD):
            self.assertIn(kind, kinds)

    def test_whitespace_before_brace_is_folded(self):
        self.assertEqual(of_kind("struct S  {};", TokenKind.BEGIN_GROUP), ["  {"])

    def test_numbers_are_not_identifiers(self):
        source = "int a = 0x1F + 1'000'000 + 1e+5 + 0x1p-3;"
        self.assertEqual(of_kind(source, TokenKind.IDENTIFIER), ["int", "a"])
        self.assertEqual(of_kind(source, TokenKind.CHAR_LITERAL), [])


class TestStackSafety(unittest.TestCase):
    """Test brace and parenthesis underflow"""

    def test_extra_brace(self):
        with self.assertRaises(UnbalancedBrace) as cm:
            scan(b"void f() {\n}\n}\n")
        self.assertEqual(cm.exception.line, 3)
        self.assertEqual(cm.exception.snippet, "}")

    def test_extra_parenthesis(self):
        with self.assertRaises(UnbalancedParenthesis) as cm:
            scan(b"int a;\nint b = (1));\n")
        self.assertEqual(cm.exception.line, 2)

    def test_extra_brace_in_initializer(self):
        with self.assertRaises(UnbalancedBrace):
            scan(b"class B { B() : x(1)} {} };")

    def test_unclosed_braces_are_accepted(self):
        """Scanning stops at end of input without checking for open frames"""
        tokens = scan(b"class A { void f() {")
        self.assertEqual(tokens[-1].kind, TokenKind.EOF)


if __name__ == '__main__':
    unittest.main()
