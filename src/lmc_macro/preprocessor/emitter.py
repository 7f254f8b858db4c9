"""
Assembly Emitter
================

Renders a macro-free program back to assembly text, one item per line:

    Instruction  ->  [label] OPCODE [operand]
    Comment      ->  #text

Fields are joined by a single separator (a space by default, a tab for
column-aligned listings). Every line ends with a newline.

Macro declarations and calls must have been removed by the expander
before rendering; meeting one here raises RenderError.
"""

from lmc_macro.errors import RenderError
from lmc_macro.preprocessor.program import Comment, Instruction, Item

# Supported field separators, by name (for the command line)
SEPARATORS = {
    "space": " ",
    "tab": "\t",
}


def render_instruction(instruction: Instruction, separator: str = " ") -> str:
    """Render a single instruction without a line terminator."""
    fields = []
    if instruction.label is not None:
        fields.append(instruction.label)
    fields.append(str(instruction.opcode))
    if instruction.operand is not None:
        fields.append(instruction.operand)
    return separator.join(fields)


def render(program: list[Item], separator: str = " ") -> str:
    """
    Render a macro-free program as assembly text.

    Args:
        program: Items to render, in order
        separator: Text placed between instruction fields

    Returns:
        Newline-terminated lines, or "" for an empty program

    Raises:
        RenderError: If a macro declaration or call is present
    """
    lines = []
    for item in program:
        if isinstance(item, Instruction):
            lines.append(render_instruction(item, separator))
        elif isinstance(item, Comment):
            lines.append(f"#{item.text}")
        else:
            where = f" at {item.location}" if item.location else ""
            raise RenderError(
                f"cannot render {type(item).__name__} '{item.identifier}'{where}: "
                f"macros must be expanded before rendering"
            )
    return "".join(f"{line}\n" for line in lines)
