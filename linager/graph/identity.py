"""
Identity References

Compact, parseable names for identifiers. Three shapes are recognised,
checked in this order:

    pkgPath:HolderType:field               struct field
    pkgPath:file.go:[function]:line:name   local in a function
    pkgPath:file.go:line:name              package-level variable

Anything else parses to an Identity carrying only the reference.
"""

from dataclasses import dataclass


class IdentityRef(str):
    """A reference string; ``identity()`` parses it."""

    def identity(self) -> "Identity":
        return parse_identity(self)


@dataclass
class Identity:
    ref: IdentityRef
    pkg_path: str = ""
    package: str = ""
    holder_type: str = ""
    file: str = ""
    function: str = ""
    line: int = 0
    name: str = ""
    kind: str = ""


def make_struct_field_ref(pkg_path: str, struct_type: str, field_name: str) -> IdentityRef:
    return IdentityRef(f"{pkg_path}:{struct_type}:{field_name}")


def make_function_ref(pkg_path: str, func_name: str) -> IdentityRef:
    return IdentityRef(f"{pkg_path}:{func_name}")


def make_var_ref(pkg_path: str, file_path: str, function: str, line: int, var_name: str) -> IdentityRef:
    if function:
        return IdentityRef(f"{pkg_path}:{file_path}:[{function}]:{line}:{var_name}")
    return IdentityRef(f"{pkg_path}:{file_path}:{line}:{var_name}")


def _parse_line(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        return 0


def _after(text: str, sep: str) -> str:
    idx = text.rfind(sep)
    return text[idx + 1:] if idx >= 0 else text


def parse_identity(ref: str) -> Identity:
    """Parse a reference into its parts; unknown shapes keep only ``ref``."""
    ref = IdentityRef(ref)
    ident = Identity(ref=ref)
    if not ref:
        return ident

    parts = ref.split(":")
    if len(parts) < 2:
        return ident

    if len(parts) == 3 and ".go" not in parts[1]:
        ident.pkg_path = parts[0]
        ident.holder_type = parts[1]
        ident.name = parts[2]
        ident.package = _after(ident.pkg_path, "/")
        ident.kind = "field"
        if ident.holder_type and ident.name:
            ident.name = f"{ident.holder_type}.{ident.name}"
    elif len(parts) == 5 and parts[2].startswith("[") and parts[2].endswith("]"):
        ident.pkg_path = parts[0]
        ident.file = parts[1]
        ident.function = parts[2][1:-1]
        ident.line = _parse_line(parts[3])
        ident.name = parts[4]
        ident.package = _after(ident.pkg_path, ".")
        ident.kind = "variable"
    elif len(parts) == 4 and parts[1].endswith(".go"):
        ident.pkg_path = parts[0]
        ident.file = parts[1]
        ident.line = _parse_line(parts[2])
        ident.name = parts[3]
        ident.package = _after(ident.pkg_path, ".")
        ident.kind = "variable"
    return ident
