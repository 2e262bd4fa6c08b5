from .nodes import Declaration, Function
from .typesys import ArrayType, RecordType, VoidType, T_INT, T_VOID

# --- Standard Library ---

def _builtin(name, return_type, *param_types):
    params = [Declaration(f"arg{i}", t, mutable=False) for i, t in enumerate(param_types)]
    return Function(name, return_type, params, [])


BUILTIN_FUNCTIONS = {
    f.identifier: f for f in (
        _builtin("writeInt", T_VOID, T_INT),
        _builtin("readInt", T_INT),
        _builtin("writeChar", T_VOID, T_INT),
        _builtin("readChar", T_INT),
    )
}

# --- Symbol Table ---

class Scope:
    def __init__(self):
        self.symbols = {}

    def add_symbol(self, name, decl):
        if name in self.symbols:
            return False
        self.symbols[name] = decl
        return True

    def lookup_current(self, name):
        return self.symbols.get(name)

    def __contains__(self, name):
        return name in self.symbols


class SymbolTable:
    """Struct, function and global tables plus the stack of local scopes.

    The declare_* methods return False without inserting when the name is
    already taken; reporting the duplicate is left to the caller.
    """

    def __init__(self):
        self.structs = {}
        self.functions = {}
        self.globals = Scope()
        self.scopes = []

    # Namespaces

    def declare_struct(self, struct):
        if struct.identifier in self.structs:
            return False
        self.structs[struct.identifier] = struct
        return True

    def declare_function(self, function):
        if function.identifier in self.functions:
            return False
        self.functions[function.identifier] = function
        return True

    def declare_global(self, decl):
        return self.globals.add_symbol(decl.identifier, decl)

    def declare_local(self, name, decl):
        if not self.scopes:
            raise RuntimeError(f"Cannot declare local '{name}' outside of a scope")
        return self.scopes[-1].add_symbol(name, decl)

    # Scopes

    def push_scope(self):
        self.scopes.append(Scope())

    def pop_scope(self):
        if not self.scopes:
            raise RuntimeError("Compiler error: Exited global scope.")
        self.scopes.pop()

    @property
    def in_local_scope(self):
        return bool(self.scopes)

    # Lookup

    def lookup(self, name):
        for scope in reversed(self.scopes):
            decl = scope.lookup_current(name)
            if decl is not None:
                return decl
        return self.globals.lookup_current(name)

    def lookup_struct(self, name):
        return self.structs.get(name)

    def lookup_function(self, name):
        # User functions shadow built-ins of the same name.
        func = self.functions.get(name)
        if func is None:
            func = BUILTIN_FUNCTIONS.get(name)
        return func

    # Type validation

    def is_valid_type(self, type, allow_void=False):
        if isinstance(type, VoidType):
            return allow_void
        if isinstance(type, ArrayType):
            return self.is_valid_type(type.element_type)
        if isinstance(type, RecordType):
            return type.name in self.structs
        return True
