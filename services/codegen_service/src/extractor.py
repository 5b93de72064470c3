import re
from functools import lru_cache
from typing import Pattern

FENCE = "```"

# Non-greedy: the first closing fence after an opener ends the block.
_GENERIC_BLOCK = re.compile(r"```([\s\S]*?)```")

@lru_cache(maxsize=16)
def _tagged_block(language: str) -> Pattern[str]:
    return re.compile(FENCE + re.escape(language) + r"([\s\S]*?)" + FENCE)

def extract_code(text: str, language: str = "lua") -> str:
    """
    Pull the code payload out of a model answer.

    Preference order: first block fenced as ```<language>, then the first
    fenced block of any kind, then the text untouched.
    """
    if language:
        tagged = _tagged_block(language).search(text)
        if tagged:
            return tagged.group(1).strip()

    generic = _GENERIC_BLOCK.search(text)
    if generic:
        return generic.group(1).strip()

    return text
