"""IR emission tests.

These look at the llvmlite objects rather than the rendered text so they do
not depend on how a given llvmlite release spells its output.
"""

import llvmlite.ir as ir
import pytest

from minicomp.compyler import LLVMCodeGen, compile_program
from minicomp.errors import CompileError, SemanticError
from minicomp.nodes import BinOp, Let, Number, Print, Program, Var
from minicomp.parser import parse


def emit(source):
    return compile_program(parse(source))


def body(module):
    main = module.get_global("main")
    assert len(main.blocks) == 1
    return main.blocks[0].instructions


def opnames(module):
    return [instr.opname for instr in body(module)]


def test_empty_program_returns_zero():
    module = emit("")
    instructions = body(module)
    assert [i.opname for i in instructions] == ['ret']
    assert instructions[0].operands[0].constant == 0


def test_main_signature():
    main = emit("").get_global("main")
    assert main.function_type.return_type == ir.IntType(32)
    assert main.function_type.args == ()
    assert main.blocks[0].name == "entry"


def test_let_allocates_then_stores():
    module = emit("let x = 5;")
    instructions = body(module)
    assert [i.opname for i in instructions] == ['alloca', 'store', 'ret']
    alloca, store, _ = instructions
    assert store.operands[0].constant == 5
    assert store.operands[1] is alloca


def test_precedence_gives_multiply_then_add():
    module = emit("let x = 2 + 3 * 4; print x;")
    assert opnames(module) == [
        'mul', 'add', 'alloca', 'store', 'load', 'getelementptr', 'call', 'ret',
    ]
    mul, add = body(module)[:2]
    assert [op.constant for op in mul.operands] == [3, 4]
    assert add.operands[0].constant == 2
    assert add.operands[1] is mul


@pytest.mark.parametrize("op,opname", [
    ('+', 'add'),
    ('-', 'sub'),
    ('*', 'mul'),
    ('/', 'sdiv'),
])
def test_each_operator_maps_to_one_instruction(op, opname):
    module = emit(f"let r = 7 {op} 2;")
    assert opnames(module)[0] == opname


def test_left_operand_is_emitted_before_right():
    module = emit("let a = 1; let b = 2; print a - b;")
    allocas = [i for i in body(module) if i.opname == 'alloca']
    loads = [i for i in body(module) if i.opname == 'load']
    assert [load.operands[0] for load in loads] == allocas
    sub = next(i for i in body(module) if i.opname == 'sub')
    assert list(sub.operands) == loads


def test_number_emits_no_instruction():
    module = emit("print 9;")
    assert opnames(module) == ['getelementptr', 'call', 'ret']


def test_redeclaration_gets_a_new_slot_and_wins():
    module = emit("let x = 1; let x = 2; print x;")
    instructions = body(module)
    allocas = [i for i in instructions if i.opname == 'alloca']
    stores = [i for i in instructions if i.opname == 'store']
    load = next(i for i in instructions if i.opname == 'load')
    assert len(allocas) == 2
    assert allocas[0] is not allocas[1]
    assert load.operands[0] is allocas[1]
    assert stores[1].operands[0].constant == 2


def test_let_can_refer_to_its_previous_value():
    module = emit("let x = 1; let x = x + 1;")
    instructions = body(module)
    first_slot = instructions[0]
    load = instructions[2]
    assert load.opname == 'load'
    assert load.operands[0] is first_slot


def test_unknown_variable_is_a_semantic_error():
    with pytest.raises(SemanticError, match="unknown variable 'y'"):
        emit("print y;")


def test_variable_used_in_its_own_first_declaration_is_unknown():
    with pytest.raises(SemanticError, match="'z'"):
        emit("let z = z;")


def test_print_calls_printf_with_format_and_value():
    module = emit("print 42;")
    printf = module.get_global("printf")
    assert printf.function_type.var_arg
    assert printf.function_type.return_type == ir.IntType(32)
    assert printf.function_type.args == (ir.IntType(8).as_pointer(),)

    gep, call, _ = body(module)
    assert call.callee is printf
    assert call.args[0] is gep
    assert call.args[1].constant == 42
    assert gep.operands[0] is module.get_global("fmt")


def test_format_string_is_one_shared_constant():
    module = emit("print 1; print 2; print 3;")
    fmt = module.get_global("fmt")
    assert fmt.global_constant
    assert bytes(fmt.initializer.constant) == b"%d\n\x00"
    calls = [i for i in body(module) if i.opname == 'call']
    assert len(calls) == 3
    assert [g.name for g in module.global_values].count("fmt") == 1


def test_program_without_print_declares_no_printf():
    module = emit("let a = 1;")
    assert "printf" not in module.globals
    assert "fmt" not in module.globals


def test_division_by_zero_is_emitted_unchecked():
    module = emit("print 1 / 0;")
    sdiv = body(module)[0]
    assert sdiv.opname == 'sdiv'
    assert sdiv.operands[1].constant == 0


def test_codegen_accepts_hand_built_trees():
    program = Program((
        Let('n', BinOp(Number(6), '*', Number(7))),
        Print(Var('n')),
    ))
    codegen = LLVMCodeGen()
    module = codegen.create_main(program)
    assert module is codegen.module
    assert set(codegen.symbols) == {'n'}


def test_codegen_rejects_foreign_nodes():
    with pytest.raises(TypeError):
        LLVMCodeGen().create_main(Program((Number(1),)))


def test_rendered_ir_names_main_and_printf():
    text = str(emit("let x = 2 + 3 * 4; print x;"))
    assert "main" in text
    assert "declare" in text and "printf" in text
    assert "ret i32 0" in text


def test_long_left_chain_emits_in_source_order():
    module = emit("print " + "+".join(str(n) for n in range(1, 1501)) + ";")
    adds = [i for i in body(module) if i.opname == 'add']
    assert len(adds) == 1499
    assert [op.constant for op in adds[0].operands] == [1, 2]
    assert adds[-1].operands[0] is adds[-2]
    assert adds[-1].operands[1].constant == 1500


def test_right_operands_still_nest():
    module = emit("print 1 - (2 - (3 - 4));")
    subs = [i for i in body(module) if i.opname == 'sub']
    assert [op.constant for op in subs[0].operands] == [3, 4]
    assert subs[2].operands[0].constant == 1
    assert subs[2].operands[1] is subs[1]


def test_excessive_right_nesting_is_a_compile_error():
    node = Number(1)
    for _ in range(5000):
        node = BinOp(Number(1), '+', node)
    with pytest.raises(CompileError, match="nested too deeply"):
        LLVMCodeGen().create_main(Program((Print(node),)))
