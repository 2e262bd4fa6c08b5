"""AST node classes for MiniJ.

The parser builds these directly; tests and other front ends may also build
them by hand. Every node takes an optional ``lineno`` for diagnostics.
"""


class Node:
    def __init__(self, lineno=None):
        self.lineno = lineno


# --- Entities ---

class Unit(Node):
    def __init__(self, structs, globals, functions, filename=None, lineno=None):
        super().__init__(lineno)
        self.structs = structs
        self.globals = globals
        self.functions = functions
        self.filename = filename


class Declaration(Node):
    """A global, local, struct field, or formal parameter."""

    def __init__(self, identifier, type, mutable=True, lineno=None):
        super().__init__(lineno)
        self.identifier = identifier
        self.type = type
        self.mutable = mutable


class Struct(Node):
    def __init__(self, identifier, fields, lineno=None):
        super().__init__(lineno)
        self.identifier = identifier
        self.fields = fields

    def find_field(self, name):
        for field in self.fields:
            if field.identifier == name:
                return field
        return None


class Function(Node):
    def __init__(self, identifier, return_type, parameters, statements, lineno=None):
        super().__init__(lineno)
        self.identifier = identifier
        self.return_type = return_type
        self.parameters = parameters
        self.statements = statements


# --- Statements ---

class Statement(Node):
    pass


class DeclarationStatement(Statement):
    def __init__(self, declaration, lineno=None):
        super().__init__(lineno if lineno is not None else declaration.lineno)
        self.declaration = declaration


class AssignmentStatement(Statement):
    def __init__(self, left, right, lineno=None):
        super().__init__(lineno)
        self.left = left
        self.right = right


class ExpressionStatement(Statement):
    def __init__(self, expression, lineno=None):
        super().__init__(lineno)
        self.expression = expression


class Block(Statement):
    def __init__(self, statements, lineno=None):
        super().__init__(lineno)
        self.statements = statements


class IfStatement(Statement):
    def __init__(self, condition, then_block, else_block=None, lineno=None):
        super().__init__(lineno)
        self.condition = condition
        self.then_block = then_block
        self.else_block = else_block


class WhileStatement(Statement):
    def __init__(self, condition, body, lineno=None):
        super().__init__(lineno)
        self.condition = condition
        self.body = body


class ReturnStatement(Statement):
    def __init__(self, expression=None, lineno=None):
        super().__init__(lineno)
        self.expression = expression


# --- Expressions ---

class Expression(Node):
    def __init__(self, lineno=None):
        super().__init__(lineno)
        # Resolved type, filled in by the type checker.
        self.type = None


class IntegerConstant(Expression):
    def __init__(self, value, lineno=None):
        super().__init__(lineno)
        self.value = value


class StringConstant(Expression):
    def __init__(self, value, lineno=None):
        super().__init__(lineno)
        self.value = value


class BooleanConstant(Expression):
    def __init__(self, value, lineno=None):
        super().__init__(lineno)
        self.value = value


class VariableAccess(Expression):
    def __init__(self, identifier, lineno=None):
        super().__init__(lineno)
        self.identifier = identifier


class CallExpression(Expression):
    def __init__(self, identifier, arguments, lineno=None):
        super().__init__(lineno)
        self.identifier = identifier
        self.arguments = arguments


class UnaryExpression(Expression):
    # op is one of '!', '-', '++', '--'; postfix tells x++ from ++x
    def __init__(self, op, expression, postfix=False, lineno=None):
        super().__init__(lineno)
        self.op = op
        self.expression = expression
        self.postfix = postfix


class BinaryExpression(Expression):
    def __init__(self, left, op, right, lineno=None):
        super().__init__(lineno)
        self.left = left
        self.op = op
        self.right = right


class FieldAccess(Expression):
    def __init__(self, base, field, lineno=None):
        super().__init__(lineno)
        self.base = base
        self.field = field


class ArrayAccess(Expression):
    def __init__(self, base, index, lineno=None):
        super().__init__(lineno)
        self.base = base
        self.index = index


LVALUE_NODES = (VariableAccess, FieldAccess, ArrayAccess)


def is_lvalue(expr):
    return isinstance(expr, LVALUE_NODES)
