import logging

import llvmlite.ir as ir

from .errors import CompileError, SemanticError
from .nodes import BinOp, Let, Number, Print, Var

log = logging.getLogger(__name__)

INT = ir.IntType(32)
CHAR_PTR = ir.IntType(8).as_pointer()

PRINT_FORMAT = "%d\n\0"

ARITHMETIC = {
    '+': ('add', 'addtmp'),
    '-': ('sub', 'subtmp'),
    '*': ('mul', 'multmp'),
    '/': ('sdiv', 'divtmp'),
}


class LLVMCodeGen:
    """Lowers a Program into a single `i32 main()` function.

    Every `let` gets a fresh stack slot, even when the name was declared
    before; the symbol table just points the name at the newest slot.
    """

    def __init__(self):
        self.module = ir.Module(name="my_module")
        self.builder = None
        self.func = None
        self.symbols = {}
        self.printf = None
        self.print_format = None

    def create_main(self, program):
        log.info("Generating LLVM IR")
        func_type = ir.FunctionType(INT, [])
        self.func = ir.Function(self.module, func_type, name="main")
        block = self.func.append_basic_block(name="entry")
        self.builder = ir.IRBuilder(block)
        for statement in program:
            try:
                self.generate_statement(statement)
            except RecursionError:
                raise CompileError("expression nested too deeply") from None
        self.builder.ret(ir.Constant(INT, 0))
        return self.module

    def generate_statement(self, node):
        match node:
            case Let(name=name, value=value):
                result = self.generate_code(value)
                slot = self.builder.alloca(INT, name=name)
                self.builder.store(result, slot)
                self.symbols[name] = slot
            case Print(value=value):
                result = self.generate_code(value)
                self.builder.call(self.declare_printf(), [self.format_pointer(), result])
            case _:
                raise TypeError(f"not a statement: {node!r}")

    def generate_code(self, node):
        match node:
            case Number(value=value):
                return ir.Constant(INT, value)
            case Var(name=name):
                slot = self.symbols.get(name)
                if slot is None:
                    raise SemanticError(f"unknown variable '{name}'")
                return self.builder.load(slot, name=name)
            case BinOp():
                return self.generate_binop(node)
            case _:
                raise TypeError(f"not an expression: {node!r}")

    def generate_binop(self, node):
        # Chains like 1+1+...+1 nest on the left; only right operands recurse.
        spine = []
        while isinstance(node, BinOp):
            spine.append(node)
            node = node.left
        result = self.generate_code(node)
        for binop in reversed(spine):
            rhs = self.generate_code(binop.right)
            method, name = ARITHMETIC[binop.op]
            result = getattr(self.builder, method)(result, rhs, name=name)
        return result

    def declare_printf(self):
        if self.printf is None:
            printf_type = ir.FunctionType(INT, [CHAR_PTR], var_arg=True)
            self.printf = ir.Function(self.module, printf_type, name="printf")
        return self.printf

    def format_pointer(self):
        if self.print_format is None:
            data = bytearray(PRINT_FORMAT.encode("ascii"))
            text = ir.Constant(ir.ArrayType(ir.IntType(8), len(data)), data)
            self.print_format = ir.GlobalVariable(self.module, text.type, name="fmt")
            self.print_format.linkage = 'private'
            self.print_format.global_constant = True
            self.print_format.unnamed_addr = True
            self.print_format.initializer = text
        zero = ir.Constant(INT, 0)
        return self.builder.gep(self.print_format, [zero, zero], inbounds=True)


def compile_program(program):
    codegen = LLVMCodeGen()
    return codegen.create_main(program)
