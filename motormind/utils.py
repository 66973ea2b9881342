import re
from typing import Optional


def normalize_text(text: str) -> str:
    """Purpose: Normalize free-form text for stable case-insensitive matching.
    Inputs/Outputs: Input is a raw string; output is lowercase with whitespace collapsed.
    Side Effects / State: None; pure function.
    Dependencies: Uses regex; called by the fuzzy matcher and inventory search.
    Failure Modes: Returns an empty string when input is falsy.
    If Removed: Model matching becomes sensitive to casing and stray spaces.
    Testing Notes: "  Hero   SPLENDOR " should become "hero splendor".
    """
    # Lowercase and collapse runs of whitespace.
    if not text:
        return ""
    return re.sub(r"\s+", " ", str(text).lower()).strip()


def title_words(text: str) -> str:
    """Purpose: Title-case each lowercase word while keeping mixed-case tokens.
    Inputs/Outputs: Input is a string; output has lowercase words capitalized.
    Side Effects / State: None; pure function.
    Dependencies: Used by the response normalizer post-validation pass.
    Failure Modes: Returns an empty string for falsy input.
    If Removed: Heuristic extraction yields "delhi" instead of "Delhi".
    Testing Notes: "hero ZX-150" becomes "Hero ZX-150".
    """
    # Only touch words that carry no uppercase letters already.
    if not text:
        return ""
    words = []
    for word in text.split():
        if word.islower():
            words.append(word[:1].upper() + word[1:])
        else:
            words.append(word)
    return " ".join(words)


def extract_json_block(text: str) -> Optional[str]:
    """Purpose: Extract the outermost JSON object block from an arbitrary string.
    Inputs/Outputs: Input is a raw string; output is the substring from the first "{"
        to the last "}" or None.
    Side Effects / State: None; pure function.
    Dependencies: None beyond built-ins; used by the response normalizer (tier 2).
    Failure Modes: Returns None if braces are missing or inverted.
    If Removed: Oracle outputs wrapped in prose or code fences cannot be parsed.
    Testing Notes: Provide strings with extra text before/after JSON and ensure extraction.
    """
    # Greedy span: first opening brace through last closing brace.
    if not text:
        return None
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end <= start:
        return None
    return text[start : end + 1]

