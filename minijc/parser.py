import os
import sys

import ply.yacc as yacc

from . import lexer as mlexer
from .nodes import (
    Unit, Declaration, Struct, Function, DeclarationStatement, AssignmentStatement,
    ExpressionStatement, Block, IfStatement, WhileStatement, ReturnStatement,
    IntegerConstant, StringConstant, BooleanConstant, VariableAccess, CallExpression,
    UnaryExpression, BinaryExpression, FieldAccess, ArrayAccess,
)
from .typesys import ArrayType, RecordType, PRIMITIVE_TYPES, T_VOID

# --- Parser Implementation ---

# Get the token map from the lexer.
tokens = mlexer.tokens

# Global variables to hold state during parsing
_parser_error_found = False
_parser_filename = ''

precedence = (
    ('left', 'OR'),
    ('left', 'AND'),
    ('left', 'EQUAL', 'NEQUAL'),
    ('left', 'LESS', 'LEQUAL', 'GREATER', 'GEQUAL'),
    ('left', 'PLUS', 'MINUS'),
    ('left', 'STAR', 'SLASH', 'MODULO'),
    ('right', 'NOT', 'UMINUS', 'PREFIX'),
    ('left', 'INCREMENT', 'DECREMENT', 'DOT', 'LBRACKET'),
)


def p_unit(p):
    'unit : member_list'
    structs = [m for m in p[1] if isinstance(m, Struct)]
    globals_ = [m for m in p[1] if isinstance(m, Declaration)]
    functions = [m for m in p[1] if isinstance(m, Function)]
    p[0] = Unit(structs, globals_, functions, filename=_parser_filename)


def p_member_list(p):
    '''member_list : member_list member
                   | empty'''
    if len(p) == 3:
        p[0] = p[1] + [p[2]]
    else:
        p[0] = []


def p_member(p):
    '''member : declaration
              | function
              | struct_definition'''
    p[0] = p[1]


def p_struct_definition(p):
    'struct_definition : STRUCT IDENTIFIER LBRACE field_list RBRACE'
    p[0] = Struct(p[2], p[4], lineno=p.lineno(2))


def p_field_list(p):
    '''field_list : field_list declaration
                  | empty'''
    if len(p) == 3:
        p[0] = p[1] + [p[2]]
    else:
        p[0] = []


def p_declaration(p):
    'declaration : IDENTIFIER COLON type_specifier SEMICOLON'
    p[0] = Declaration(p[1], p[3], mutable=True, lineno=p.lineno(1))


def p_function(p):
    'function : FUNCTION IDENTIFIER LPAREN params RPAREN return_type block'
    p[0] = Function(p[2], p[6], p[4], p[7].statements, lineno=p.lineno(2))


def p_return_type(p):
    '''return_type : COLON type_specifier
                   | empty'''
    p[0] = p[2] if len(p) == 3 else T_VOID


def p_params(p):
    '''params : param_list
              | empty'''
    p[0] = p[1] if p[1] is not None else []


def p_param_list(p):
    '''param_list : param_list COMMA param
                  | param'''
    if len(p) == 4:
        p[0] = p[1] + [p[3]]
    else:
        p[0] = [p[1]]


def p_param(p):
    '''param : IDENTIFIER COLON type_specifier
             | OUT IDENTIFIER COLON type_specifier'''
    if len(p) == 5:
        p[0] = Declaration(p[2], p[4], mutable=True, lineno=p.lineno(2))
    else:
        p[0] = Declaration(p[1], p[3], mutable=False, lineno=p.lineno(1))


def p_type_specifier(p):
    '''type_specifier : TYPE
                      | IDENTIFIER
                      | type_specifier LBRACKET RBRACKET'''
    if len(p) == 4:
        p[0] = ArrayType(p[1])
    elif p.slice[1].type == 'TYPE':
        p[0] = PRIMITIVE_TYPES[p[1]]
    else:
        p[0] = RecordType(p[1])


def p_block(p):
    'block : LBRACE statement_list RBRACE'
    p[0] = Block(p[2], lineno=p.lineno(1))


def p_statement_list(p):
    '''statement_list : statement_list statement
                      | empty'''
    if len(p) == 3:
        p[0] = p[1] + [p[2]]
    else:
        p[0] = []


def p_statement(p):
    '''statement : block
                 | if_statement
                 | while_statement
                 | return_statement'''
    p[0] = p[1]


def p_statement_declaration(p):
    'statement : declaration'
    p[0] = DeclarationStatement(p[1], lineno=p[1].lineno)


def p_statement_assign(p):
    'statement : expression ASSIGN expression SEMICOLON'
    p[0] = AssignmentStatement(p[1], p[3], lineno=p.lineno(2))


def p_statement_expression(p):
    'statement : expression SEMICOLON'
    p[0] = ExpressionStatement(p[1], lineno=p.lineno(2))


def p_if_statement(p):
    '''if_statement : IF LPAREN expression RPAREN block
                    | IF LPAREN expression RPAREN block ELSE block'''
    else_block = p[7] if len(p) == 8 else None
    p[0] = IfStatement(p[3], p[5], else_block, lineno=p.lineno(1))


def p_if_statement_else_if(p):
    'if_statement : IF LPAREN expression RPAREN block ELSE if_statement'
    else_block = Block([p[7]], lineno=p.lineno(6))
    p[0] = IfStatement(p[3], p[5], else_block, lineno=p.lineno(1))


def p_while_statement(p):
    'while_statement : WHILE LPAREN expression RPAREN block'
    p[0] = WhileStatement(p[3], p[5], lineno=p.lineno(1))


def p_return_statement(p):
    '''return_statement : RETURN SEMICOLON
                        | RETURN expression SEMICOLON'''
    expr = p[2] if len(p) == 4 else None
    p[0] = ReturnStatement(expr, lineno=p.lineno(1))


def p_expression_binop(p):
    '''expression : expression PLUS expression
                  | expression MINUS expression
                  | expression STAR expression
                  | expression SLASH expression
                  | expression MODULO expression
                  | expression LESS expression
                  | expression LEQUAL expression
                  | expression GREATER expression
                  | expression GEQUAL expression
                  | expression EQUAL expression
                  | expression NEQUAL expression
                  | expression AND expression
                  | expression OR expression'''
    p[0] = BinaryExpression(p[1], p[2], p[3], lineno=p.lineno(2))


def p_expression_unary(p):
    '''expression : NOT expression
                  | MINUS expression %prec UMINUS
                  | INCREMENT expression %prec PREFIX
                  | DECREMENT expression %prec PREFIX'''
    p[0] = UnaryExpression(p[1], p[2], postfix=False, lineno=p.lineno(1))


def p_expression_postfix(p):
    '''expression : expression INCREMENT
                  | expression DECREMENT'''
    p[0] = UnaryExpression(p[2], p[1], postfix=True, lineno=p.lineno(2))


def p_expression_field(p):
    'expression : expression DOT IDENTIFIER'
    p[0] = FieldAccess(p[1], p[3], lineno=p.lineno(2))


def p_expression_index(p):
    'expression : expression LBRACKET expression RBRACKET'
    p[0] = ArrayAccess(p[1], p[3], lineno=p.lineno(2))


def p_expression_call(p):
    'expression : IDENTIFIER LPAREN argument_list_opt RPAREN'
    p[0] = CallExpression(p[1], p[3], lineno=p.lineno(1))


def p_argument_list_opt(p):
    '''argument_list_opt : argument_list
                         | empty'''
    p[0] = p[1] if p[1] else []


def p_argument_list(p):
    '''argument_list : expression
                     | argument_list COMMA expression'''
    if len(p) == 2:
        p[0] = [p[1]]
    else:
        p[0] = p[1] + [p[3]]


def p_expression_group(p):
    'expression : LPAREN expression RPAREN'
    p[0] = p[2]


def p_expression_variable(p):
    'expression : IDENTIFIER'
    p[0] = VariableAccess(p[1], lineno=p.lineno(1))


def p_expression_integer(p):
    'expression : INTEGER'
    p[0] = IntegerConstant(p[1], lineno=p.lineno(1))


def p_expression_string(p):
    'expression : STRING'
    p[0] = StringConstant(p[1], lineno=p.lineno(1))


def p_expression_boolean(p):
    '''expression : TRUE
                  | FALSE'''
    p[0] = BooleanConstant(p[1] == 'true', lineno=p.lineno(1))


def p_empty(p):
    'empty :'
    pass


def p_error(p):
    global _parser_error_found
    if _parser_error_found:
        return  # Avoid cascading errors

    _parser_error_found = True
    if p:
        sys.stderr.write(f"Parser error in file {_parser_filename} line {p.lineno} at text {p.value}\n")
        sys.stderr.write(f"  Description: Unexpected token '{p.type}'\n")
    else:
        sys.stderr.write(f"Parser error in file {_parser_filename}: Unexpected end of file\n")


# --- Main Parser Functions ---

_parser = None


def _get_parser():
    global _parser
    if _parser is None:
        _parser = yacc.yacc(module=sys.modules[__name__], debug=False, write_tables=False)
    return _parser


def parse_source(source_code, filename='<string>'):
    """
    Parses MiniJ source text and returns the Unit.
    Returns None if lexing or parsing fails.
    """
    global _parser_error_found, _parser_filename
    _parser_error_found = False
    _parser_filename = filename

    lexer = mlexer.build_lexer(filename)
    unit = _get_parser().parse(source_code, lexer=lexer)

    if _parser_error_found or mlexer.error_found:
        return None
    return unit


def build_ast(filename):
    """
    Parses the source file and returns the AST.
    Returns None if parsing fails.
    """
    try:
        with open(filename, 'r', encoding='utf-8') as f:
            source_code = f.read()
    except FileNotFoundError:
        sys.stderr.write(f"Error: Input file not found at '{filename}'\n")
        return None

    return parse_source(source_code, filename)


def write_parser_output(unit, filename):
    """
    Takes a valid AST and writes the parser listing file.
    """
    output_filename = os.path.splitext(filename)[0] + ".parser"
    try:
        with open(output_filename, 'w', encoding='utf-8') as f:
            for struct in unit.structs:
                f.write(f"File {filename} Line {struct.lineno}: global struct {struct.identifier}\n")
                for field in struct.fields:
                    f.write(f"File {filename} Line {field.lineno}: member {field.identifier}\n")

            for decl in unit.globals:
                f.write(f"File {filename} Line {decl.lineno}: global variable {decl.identifier}\n")

            for function in unit.functions:
                f.write(f"File {filename} Line {function.lineno}: function {function.identifier}\n")
                for param in function.parameters:
                    f.write(f"File {filename} Line {param.lineno}: parameter {param.identifier}\n")
                for stmt in function.statements:
                    if isinstance(stmt, DeclarationStatement):
                        decl = stmt.declaration
                        f.write(f"File {filename} Line {decl.lineno}: local variable {decl.identifier}\n")

        print(f"Successfully generated parser output at: {output_filename}")
        return True
    except IOError:
        sys.stderr.write(f"Error: Could not write to output file '{output_filename}'.\n")
        return False
