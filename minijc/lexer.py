import os
import sys

import ply.lex as lex

# Dictionary of reserved keywords for PLY
reserved = {
    'struct': 'STRUCT', 'function': 'FUNCTION', 'if': 'IF', 'else': 'ELSE',
    'while': 'WHILE', 'return': 'RETURN', 'out': 'OUT',
    'true': 'TRUE', 'false': 'FALSE',
    'int': 'TYPE', 'boolean': 'TYPE', 'string': 'TYPE', 'void': 'TYPE',
}

# Base list of tokens that are not keywords
base_tokens = [
    'IDENTIFIER', 'INTEGER', 'STRING',
    # Two-char operators
    'INCREMENT', 'DECREMENT', 'EQUAL', 'NEQUAL', 'LEQUAL', 'GEQUAL', 'AND', 'OR',
    # Single-char symbols
    'PLUS', 'MINUS', 'STAR', 'SLASH', 'MODULO', 'ASSIGN', 'LESS', 'GREATER', 'NOT',
    'LPAREN', 'RPAREN', 'LBRACE', 'RBRACE', 'LBRACKET', 'RBRACKET',
    'SEMICOLON', 'COMMA', 'DOT', 'COLON',
]
# Use a set to get unique token names from the reserved map, then combine lists.
tokens = base_tokens + sorted(set(reserved.values()))

MAX_IDENTIFIER_LENGTH = 48

# --- PLY Token Definitions ---

# Whitespace (tabs and spaces)
t_ignore = ' \t\r'

# An error flag to be used by the main function
error_found = False


def t_ignore_COMMENT(t):
    r'/\*[\s\S]*?\*/|//.*'
    t.lexer.lineno += t.value.count('\n')


def t_IDENTIFIER(t):
    r'[a-zA-Z_][a-zA-Z0-9_]*'
    t.type = reserved.get(t.value, 'IDENTIFIER')
    if len(t.value) > MAX_IDENTIFIER_LENGTH:
        custom_error(t, f"Identifier '{t.value[:20]}...' is too long")
    return t


def t_INTEGER(t):
    r'\d+'
    t.value = int(t.value)
    return t


def t_STRING(t):
    r'"([^"\\\n]|\\.)*"'
    t.value = t.value[1:-1]
    return t


# Two-character operators are longer regexes, so PLY tries them first
t_INCREMENT = r'\+\+'
t_DECREMENT = r'--'
t_EQUAL     = r'=='
t_NEQUAL    = r'!='
t_LEQUAL    = r'<='
t_GEQUAL    = r'>='
t_AND       = r'&&'
t_OR        = r'\|\|'

# Single-character symbols
t_PLUS      = r'\+'
t_MINUS     = r'-'
t_STAR      = r'\*'
t_SLASH     = r'/'
t_MODULO    = r'%'
t_ASSIGN    = r'='
t_LESS      = r'<'
t_GREATER   = r'>'
t_NOT       = r'!'
t_LPAREN    = r'\('
t_RPAREN    = r'\)'
t_LBRACE    = r'\{'
t_RBRACE    = r'\}'
t_LBRACKET  = r'\['
t_RBRACKET  = r'\]'
t_SEMICOLON = r';'
t_COMMA     = r','
t_DOT       = r'\.'
t_COLON     = r':'


def t_newline(t):
    r'\n+'
    t.lexer.lineno += len(t.value)


def t_error(t):
    """Handles invalid characters and unterminated strings."""
    lexer = t.lexer
    if t.value[0] == '"':
        # An unclosed string runs to the end of the line or file.
        newline_pos = lexer.lexdata.find("\n", lexer.lexpos + 1)
        end_pos = newline_pos if newline_pos != -1 else len(lexer.lexdata)

        malformed_text = lexer.lexdata[lexer.lexpos:end_pos]
        t.value = malformed_text
        custom_error(t, "Unclosed string literal")
        lexer.skip(len(malformed_text))
    else:
        custom_error(t, f"Invalid character '{t.value[0]}'")
        lexer.skip(1)


def custom_error(t, message):
    """A centralized function for reporting errors."""
    global error_found
    error_found = True
    sys.stderr.write(f"Lexer error in file {t.lexer.filename} line {t.lineno} at text {t.value}\n")
    sys.stderr.write(f"  Description: {message}\n")


def build_lexer(filename='<string>'):
    """Returns a fresh PLY lexer for MiniJ and clears the error flag."""
    global error_found
    error_found = False
    lexer = lex.lex(module=sys.modules[__name__])
    lexer.filename = filename
    return lexer


def tokenize(source, filename='<string>'):
    lexer = build_lexer(filename)
    lexer.input(source)
    return list(lexer)


# --- Main Lexer Function ---
def run_lexical_analysis(filename):
    try:
        with open(filename, 'r', encoding='utf-8', errors='replace') as f:
            source_code = f.read()
    except FileNotFoundError:
        sys.stderr.write(f"Error: Input file not found at '{filename}'\n")
        return False

    toks = tokenize(source_code, filename)
    output_filename = os.path.splitext(filename)[0] + ".lexer"

    if error_found:
        # Do not leave a stale dump next to a file that no longer lexes.
        print("Lexing failed due to errors.", file=sys.stderr)
        if os.path.exists(output_filename):
            os.remove(output_filename)
        return False

    output_lines = [f"File {filename} Line {tok.lineno} Token {tok.type} Text {tok.value}" for tok in toks]
    try:
        with open(output_filename, 'w', encoding='utf-8') as f:
            f.write("\n".join(output_lines))
            f.write("\n")
        print(f"Successfully generated token file at: {output_filename}")
        return True
    except IOError:
        sys.stderr.write(f"Error: Could not write to output file '{output_filename}'.\n")
        return False
