import logging
import os
import subprocess

import llvmlite.binding as llvm

from .errors import BackendError

log = logging.getLogger(__name__)


def make_temp_output(codegen_module, path):
    log.info("Saving LLVM IR to %s", path)
    try:
        with open(path, "w") as f:
            f.write(str(codegen_module))
    except OSError as exc:
        raise BackendError(f"cannot write {path}: {exc.strerror or exc}") from exc


def verify_ir(codegen_module):
    """Round-trip the textual IR through LLVM and run its verifier."""
    log.info("Verifying LLVM IR")
    try:
        parsed = llvm.parse_assembly(str(codegen_module))
        parsed.verify()
    except RuntimeError as exc:
        raise BackendError(f"invalid LLVM IR: {exc}") from exc
    return parsed


def _run_tool(command):
    log.debug("Running %s", " ".join(command))
    try:
        subprocess.run(command, check=True, capture_output=True, text=True)
    except FileNotFoundError as exc:
        raise BackendError(f"{command[0]} not found") from exc
    except subprocess.CalledProcessError as exc:
        detail = (exc.stderr or "").strip()
        raise BackendError(f"{command[0]} failed with status {exc.returncode}: {detail}") from exc


def convert_ir_to_asm(ll_path, obj_path):
    log.info("Converting LLVM IR to an object file")
    llc = os.environ.get("MINICOMP_LLC", "llc")
    _run_tool([llc, "-filetype=obj", ll_path, "-o", obj_path])


def convert_asm_to_exe(obj_path, exe_path):
    log.info("Linking %s into %s", obj_path, exe_path)
    cc = os.environ.get("MINICOMP_CC", "clang")
    _run_tool([cc, obj_path, "-o", exe_path])
