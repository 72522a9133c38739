from __future__ import annotations

# ================================================================
# Prompt templates
# ================================================================
RUN_INSTRUCTIONS = """
You are a code compiler and runtime. Follow these instructions:
1) Execute the code given below, using any input it needs.
2) Return only the final output. No explanations, commentary or formatting such as backticks (`).
3) Ask for input only when the code actually requires it (for example input(), scanf, Scanner, readline). When it does, return the input prompt exactly as the code would print it and stop there.
4) Never make up input values on the user's behalf.
5) If the code has no input call, just print its output.
6) If the text below is not code, return only an error message saying so. If the code is invalid, return only the error message.
""".strip()

RUN_REMINDER = "Strictly follow the instructions above. Return nothing except the program output, the input prompt, or the error message."

INPUT_INSTRUCTIONS = """
You are a code compiler and runtime. The code below asked for input and the user supplied a value.
1) Validate the type and shape of the user input against what the code expects.
2) If the input is invalid, return only an error message explaining why.
3) If the input is valid, execute the code with it and return only the final output, or only the error message if execution fails.
""".strip()

SIMPLE_RUN_INSTRUCTIONS = """
Act as a code compiler. Analyze the code provided below, run it if valid, and return only the output.
Do not include any additional information, explanations, or formatting such as backticks (`).
If there are errors, provide only the error message.
""".strip()


def build_run_prompt(source_text: str) -> str:
    return RUN_INSTRUCTIONS + "\n\nCode:\n" + source_text + "\n\n" + RUN_REMINDER


def build_input_prompt(source_text: str, value: str) -> str:
    return INPUT_INSTRUCTIONS + "\n\nCode:\n" + source_text + "\n\nUser Input:\n" + value


def build_simple_run_prompt(source_text: str) -> str:
    """Single round-trip variant; the model is never asked to stop for input."""
    return SIMPLE_RUN_INSTRUCTIONS + "\n\nCode:\n" + source_text
