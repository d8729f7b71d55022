from __future__ import annotations

from typing import Dict, List

from .schemas import LanguageConfig, LanguageInfo, UnsupportedLanguageError

LANGUAGES: Dict[str, LanguageConfig] = {
    "python": LanguageConfig(key="python", runtime="python", version="3.10.0", file_name="main.py", display_name="Python"),
    "javascript": LanguageConfig(key="javascript", runtime="javascript", version="18.15.0", file_name="main.js", display_name="JavaScript"),
    "cpp": LanguageConfig(key="cpp", runtime="cpp", version="10.2.0", file_name="main.cpp", display_name="C++"),
    "java": LanguageConfig(key="java", runtime="java", version="15.0.2", file_name="Main.java", display_name="Java"),
    "c": LanguageConfig(key="c", runtime="c", version="10.2.0", file_name="main.c", display_name="C"),
}

STARTER_CODE: Dict[str, str] = {
    "python": (
        "# Write your solution here\n"
        "def solution():\n"
        "    # Your code here\n"
        "    pass\n"
        "\n"
        "# Test your solution\n"
        "print(solution())\n"
    ),
    "javascript": (
        "// Write your solution here\n"
        "function solution() {\n"
        "    // Your code here\n"
        "}\n"
        "\n"
        "// Test your solution\n"
        "console.log(solution());\n"
    ),
    "cpp": (
        "#include <iostream>\n"
        "#include <vector>\n"
        "using namespace std;\n"
        "\n"
        "// Write your solution here\n"
        "int main() {\n"
        "    // Your code here\n"
        "    \n"
        "    return 0;\n"
        "}\n"
    ),
    "java": (
        "public class Main {\n"
        "    public static void main(String[] args) {\n"
        "        // Write your solution here\n"
        "        \n"
        "    }\n"
        "}\n"
    ),
    "c": (
        "#include <stdio.h>\n"
        "\n"
        "int main() {\n"
        "    // Write your solution here\n"
        "    \n"
        "    return 0;\n"
        "}\n"
    ),
}


def resolve_language(language: object) -> LanguageConfig:
    """Exact-match lookup; anything unknown (including non-strings) fails fast."""
    if not isinstance(language, str) or language not in LANGUAGES:
        raise UnsupportedLanguageError(language)
    return LANGUAGES[language]


def display_name(language: str) -> str:
    cfg = LANGUAGES.get(language)
    return cfg.display_name if cfg else language


def list_languages() -> List[LanguageInfo]:
    return [
        LanguageInfo(
            key=cfg.key,
            name=cfg.display_name,
            runtime=cfg.runtime,
            version=cfg.version,
            file_name=cfg.file_name,
            starter_code=STARTER_CODE[cfg.key],
        )
        for cfg in LANGUAGES.values()
    ]
