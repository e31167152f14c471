"""LaTeX cleanup for math sections.

Hides the details of turning LaTeX notation into readable plain text,
since terminal renderers cannot typeset it.
"""

import re

_SYMBOLS = [
    (r"\\sum", "∑"),
    (r"\\prod", "∏"),
    (r"\\int", "∫"),
    (r"\\infty", "∞"),
    (r"\\pi", "π"),
    (r"\\alpha", "α"),
    (r"\\beta", "β"),
    (r"\\gamma", "γ"),
    (r"\\delta", "δ"),
    (r"\\theta", "θ"),
    (r"\\lambda", "λ"),
    (r"\\mu", "μ"),
    (r"\\sigma", "σ"),
    (r"\\times", "×"),
    (r"\\cdot", "·"),
    (r"\\pm", "±"),
    (r"\\leq", "≤"),
    (r"\\geq", "≥"),
    (r"\\neq", "≠"),
    (r"\\approx", "≈"),
    (r"\\rightarrow", "→"),
    (r"\\ldots", "..."),
    (r"\\cdots", "..."),
    (r"\\qquad", "  "),
    (r"\\quad", " "),
]


def clean_latex(text: str) -> str:
    """Convert LaTeX notation to plain text equivalents.

    Handles:
    - \\( ... \\) and \\[ ... \\] math delimiters
    - $...$ and $$...$$ math delimiters
    - \\begin{env} ... \\end{env} environments
    - common commands such as \\frac, \\sqrt and Greek letters
    """
    # Delimiters
    text = re.sub(r"\\\(\s*", "", text)
    text = re.sub(r"\s*\\\)", "", text)
    text = re.sub(r"\\\[\s*", "", text)
    text = re.sub(r"\s*\\\]", "", text)
    text = re.sub(r"\$\$\s*", "", text)
    text = re.sub(r"(?<!\\)\$([^$\n]+)(?<!\\)\$", r"\1", text)
    text = re.sub(r"\\(?:begin|end)\{[^}]*\}", "", text)

    # Commands
    text = re.sub(r"\\frac\{([^}]*)\}\{([^}]*)\}", r"(\1)/(\2)", text)
    text = re.sub(r"\\sqrt\{([^}]*)\}", r"√(\1)", text)
    for pattern, replacement in _SYMBOLS:
        text = re.sub(pattern + r"(?![a-zA-Z])", replacement, text)
    text = re.sub(r"\\(?:text|textbf|textit|mathrm|mathbf)\{([^}]*)\}", r"\1", text)

    # Remaining commands keep their argument
    text = re.sub(r"\\[a-zA-Z]+\{([^}]*)\}", r"\1", text)

    # Superscripts and subscripts
    text = re.sub(r"\^\{([^}]*)\}", r"^(\1)", text)
    text = re.sub(r"_\{([^}]*)\}", r"_(\1)", text)

    return text.strip()
