#!/usr/bin/env python3
"""
demo.py - Walkthrough: the tape calculator step by step

Each step runs one controller operation on an in-memory text buffer and
prints the text before and after. Press Enter to advance.

WHAT YOU'LL SEE:
  1-2:  Scanning       - Totalling numbers already in the text
  3-4:  Building       - Entering rows, tax and memory tokens
  5-6:  Editing        - Inserting and deleting rows in place
  7-8:  Frames         - Drawing and stripping a box
  9:    Atomicity      - A failed operation leaves the text untouched

Run:
    python demo.py                 # pause between steps
    python demo.py --quick         # run all steps without pausing
    python demo.py --interactive   # type the rows of step 3 yourself
"""

import sys

from tapecalc import (
    TapeController, TapeConfig, TextBuffer, Position,
    ScriptedInput, ConsoleInput, OperatorInterpreter,
    TapeError,
)


QUICK_MODE = "--quick" in sys.argv
INTERACTIVE = "--interactive" in sys.argv

CONFIG = TapeConfig(verbose=True)
FRAMED = CONFIG.with_overrides(draw_frames=True)


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def show(buffer: TextBuffer, label: str):
    print(f"\n--- {label} ---\n")
    for line in buffer.lines:
        print(f"    |{line}")


# ============================================================================
# SCANNING (Steps 1-2)
# ============================================================================

def step_01_scan_realign():
    step_header(1, "Scan and Sum",
        "Total the column of numbers under the cursor and rewrite it as a ledger.")
    buffer = TextBuffer("Groceries\n  bread 3.25\n  milk 1.80\n  cheese 12\n\nnext week", Position(2, 8))
    show(buffer, "Before")
    TapeController(buffer, CONFIG).scan_and_sum()
    show(buffer, "After")
    wait_for_enter()


def step_02_scan_in_place():
    step_header(2, "Scan Without Realigning",
        "With auto_realign off the numbers stay where they are; a total goes below.")
    buffer = TextBuffer("rent     1,200\npower       85.40\nwater       30", Position(0, 10))
    show(buffer, "Before")
    TapeController(buffer, CONFIG.with_overrides(auto_realign=False)).scan_and_sum()
    show(buffer, "After")
    wait_for_enter()


# ============================================================================
# BUILDING (Steps 3-4)
# ============================================================================

def step_03_build(buffer: TextBuffer) -> TextBuffer:
    step_header(3, "Build a Ledger",
        "Enter values one at a time. T adds sales tax; an empty value ends the tape.")
    if INTERACTIVE:
        source = ConsoleInput(OperatorInterpreter.for_config(CONFIG))
    else:
        source = ScriptedInput(["100", "25.50", "2*", "T"], ["rent", "power", "double it", None])
    TapeController(buffer, CONFIG, source).build_ledger()
    show(buffer, "Built")
    wait_for_enter()
    return buffer


def step_04_memory():
    step_header(4, "Memory Tokens",
        "M+ stores the running sum, C clears it, MR recalls the stored value.")
    buffer = TextBuffer("")
    source = ScriptedInput(["40", "2", "M+", "C", "5", "MR"])
    TapeController(buffer, CONFIG, source).build_ledger()
    show(buffer, "Built")
    wait_for_enter()


# ============================================================================
# EDITING (Steps 5-6)
# ============================================================================

def step_05_insert(buffer: TextBuffer):
    step_header(5, "Insert Rows",
        "Rows entered during an edit go before the cursor row; the total is recomputed.")
    buffer.move_cursor(Position(1, 0))
    source = ScriptedInput(["9.99"], ["internet"])
    TapeController(buffer, CONFIG, source).edit_ledger()
    show(buffer, "After inserting before row 2")
    wait_for_enter()


def step_06_delete(buffer: TextBuffer):
    step_header(6, "Delete Rows",
        "Deleting rows re-parses the ledger, recomputes the total and narrows the columns.")
    buffer.move_cursor(Position(2, 0))
    TapeController(buffer, CONFIG).delete_rows(2)
    show(buffer, "After deleting rows 3-4")
    wait_for_enter()


# ============================================================================
# FRAMES (Steps 7-8)
# ============================================================================

def step_07_frames():
    step_header(7, "Framed Ledgers",
        "With draw_frames on, ledgers are written inside a box.")
    buffer = TextBuffer("")
    TapeController(buffer, FRAMED, ScriptedInput(["1,000", "250-"], ["budget", "spent"])).build_ledger()
    show(buffer, "Framed")
    wait_for_enter()
    return buffer


def step_08_strip(buffer: TextBuffer):
    step_header(8, "Strip a Frame",
        "Stripping is the exact inverse of drawing.")
    buffer.move_cursor(Position(2, 3))
    TapeController(buffer, FRAMED).strip_frame()
    show(buffer, "Stripped")
    wait_for_enter()


# ============================================================================
# ATOMICITY (Step 9)
# ============================================================================

def step_09_atomicity():
    step_header(9, "All or Nothing",
        "Dividing by zero aborts the build and rolls back every row it wrote.")
    buffer = TextBuffer("keep this line")
    source = ScriptedInput(["10", "5", "0/"])
    try:
        TapeController(buffer, CONFIG, source).build_ledger()
    except TapeError as e:
        print(f"\nError surfaced to the caller: {type(e).__name__}: {e}")
    show(buffer, "Text after the failed build")
    wait_for_enter()


def main():
    print("=" * 70)
    print("       TAPE CALCULATOR WALKTHROUGH")
    print("=" * 70)

    step_01_scan_realign()
    step_02_scan_in_place()
    ledger_text = step_03_build(TextBuffer(""))
    step_04_memory()
    step_05_insert(ledger_text)
    step_06_delete(ledger_text)
    framed = step_07_frames()
    step_08_strip(framed)
    step_09_atomicity()

    print("\n" + "=" * 70)
    print("       WALKTHROUGH COMPLETE")
    print("=" * 70)
    print("""
    Next steps:
      - See tapecalc/controller.py for the operations
      - Run tests: pytest tests/
    """)


if __name__ == "__main__":
    main()
