"""
Interactive keystroke REPL for LIVEXPR.

Each input line is typed at the caret one character at a time, exactly as if
the keys had been pressed in a text field. After every line the text box, the
tree and the errors are printed. Lines starting with ``:`` are commands:

    :left [n]              move the caret left
    :right [n]             move the caret right
    :back [n]              backspace
    :reset TEXT            replace the text (caret goes to 0)
    :tree                  print the tree
    :tokens                print the tokens
    :errors                print the error leaves
    :diagram               print the Mermaid flowchart
    :affected insert|delete  ranges a pending edit at the caret would affect
    exit / quit            leave
"""

import json
import logging

from livexpr.livexpr_cli import format_errors, format_tokens, format_tree
from livexpr.livexpr_constants import DEFAULT_TEXT, EDIT_KINDS
from livexpr.livexpr_diagram import Diagrammer
from livexpr.livexpr_editor import EditorSession

LOG = logging.getLogger(__name__)


def print_state(session: EditorSession) -> None:
    print(session.text_box.render())
    print(format_errors(session.tree))


def _count(arg: str) -> int:
    if not arg:
        return 1
    n = int(arg)
    if n < 0:
        raise ValueError(f"Expected a non-negative count, got {n}")
    return n


def handle_command(session: EditorSession, src: str) -> bool:
    """Runs a ``:command`` line. Returns False if ``src`` is not a command."""
    if not src.startswith(":"):
        return False
    name, _, arg = src[1:].partition(" ")
    name = name.lower()
    arg = arg.strip()
    try:
        if name == "left":
            for _ in range(_count(arg)):
                session.left()
            print_state(session)
        elif name == "right":
            for _ in range(_count(arg)):
                session.right()
            print_state(session)
        elif name == "back":
            for _ in range(_count(arg)):
                session.backspace()
            print_state(session)
        elif name == "reset":
            session.reset(arg)
            print_state(session)
        elif name == "tree":
            print(format_tree(session.tree).rstrip("\n"))
        elif name == "tokens":
            print(format_tokens(session.tokens))
        elif name == "errors":
            print(format_errors(session.tree))
        elif name == "diagram":
            print(Diagrammer("mermaid").render(session.tree).rstrip("\n"))
        elif name == "affected":
            if arg not in EDIT_KINDS:
                print(f"[error] >>> Usage: :affected {'|'.join(EDIT_KINDS)}")
            else:
                ranges = session.affected(arg)  # type: ignore[arg-type]
                print(json.dumps([list(r) for r in ranges]))
        else:
            print(f"[error] >>> Unknown command: {name}")
    except ValueError as e:
        print(f"[error] >>> {e}")
    return True


def start_repl(text: str | None = None) -> None:
    session = EditorSession(DEFAULT_TEXT if text is None else text)
    print("Livexpr REPL. Type to insert at the caret, ':help' for commands, 'exit' to leave.")
    print_state(session)

    while True:
        try:
            line = input(">>> ")
        except (KeyboardInterrupt, EOFError):
            print("\nExiting Livexpr REPL.")
            break
        if line.strip() in ("exit", "quit"):
            print("Exiting Livexpr REPL.")
            return
        if line.strip() == ":help":
            print(__doc__)
            continue
        if handle_command(session, line.strip()):
            continue
        for ch in line:
            session.type_char(ch)
        LOG.debug("typed %d characters, caret at %d", len(line), session.caret)
        print_state(session)


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()
