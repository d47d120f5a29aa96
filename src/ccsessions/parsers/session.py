"""Session transcript parsing utilities.

Handles the JSONL transcripts Claude Code writes under ``projects/``. Every
line is parsed on its own; a torn or garbled line is skipped rather than
failing the whole file, because the CLI may still be appending to it.
"""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

# Text the CLI injects as a "user" turn that the user never typed
SYNTHETIC_PREFIXES = ("Caveat:", "<command", "<local-command")

EMPTY_FIRST_MESSAGE = "(empty)"
CONVERSATION_TYPES = ("user", "assistant")


def iter_jsonl_objects(lines):
    """Yield each line of a JSONL stream that parses to a JSON object.

    Blank lines, invalid JSON and non-object values are skipped.
    """
    for line in lines:
        line = line.strip()
        if not line:
            continue
        try:
            obj = json.loads(line)
        except (ValueError, RecursionError):
            # RecursionError: absurdly nested garbage from a torn write
            continue
        if isinstance(obj, dict):
            yield obj


def extract_text_from_content(content):
    """Extract plain text from message content.

    Handles both string content (older format) and array content (newer format).

    Args:
        content: Either a string or a list of content blocks like
                 [{"type": "text", "text": "..."}, {"type": "image", ...}]

    Returns:
        The concatenated text of all ``text`` blocks, or empty string if there
        is none. Whitespace is preserved so prefix checks see the raw text.
    """
    if isinstance(content, str):
        return content
    elif isinstance(content, list):
        texts = []
        for block in content:
            if isinstance(block, dict) and block.get("type") == "text":
                text = block.get("text")
                if isinstance(text, str):
                    texts.append(text)
        return "".join(texts)
    return ""


def is_synthetic_text(text):
    """True for command echoes and caveats the CLI records as user turns."""
    return text.startswith(SYNTHETIC_PREFIXES)


def get_message_text(obj):
    """Return the display text of a transcript line, or None.

    Only non-meta ``user``/``assistant`` lines carrying ``message.content``
    qualify; synthetic command text is filtered out as well.
    """
    if obj.get("type") not in CONVERSATION_TYPES:
        return None
    if obj.get("isMeta") is True:
        return None
    message = obj.get("message")
    if not isinstance(message, dict) or "content" not in message:
        return None
    text = extract_text_from_content(message["content"])
    if is_synthetic_text(text):
        return None
    return text


def scan_session_file(filepath):
    """Derive the list metadata of a transcript in a single pass.

    Returns a ``(custom_title, message_count, first_message)`` tuple:

    - every qualifying user line counts as a message, even when its text
      is blank (tool results have no text blocks);
    - the first non-blank user text becomes ``first_message`` with newlines
      flattened, or ``"(empty)"`` when there is none;
    - the last non-empty ``customTitle`` in file order is the title, since
      renames are appended rather than written in place.

    Raises OSError if the file cannot be read at all.
    """
    title = None
    count = 0
    first = None

    with open(filepath, "r", encoding="utf-8", errors="replace") as f:
        for obj in iter_jsonl_objects(f):
            custom_title = obj.get("customTitle")
            if isinstance(custom_title, str) and custom_title:
                title = custom_title

            if obj.get("type") != "user":
                continue
            text = get_message_text(obj)
            if text is None:
                continue
            count += 1
            if first is None and text.strip():
                first = text.replace("\n", " ")

    return title, count, first if first is not None else EMPTY_FIRST_MESSAGE


def render_conversation(filepath, max_messages=None):
    """Render the user/assistant turns of a transcript as plain text.

    Each qualifying non-blank turn becomes ``"\\n[ROLE]\\n<text>\\n"``. With
    ``max_messages`` only the first N turns are rendered.

    Raises OSError if the file cannot be read.
    """
    parts = []
    with open(filepath, "r", encoding="utf-8", errors="replace") as f:
        for obj in iter_jsonl_objects(f):
            if max_messages is not None and len(parts) >= max_messages:
                break
            text = get_message_text(obj)
            if text is None or not text.strip():
                continue
            parts.append(f"\n[{obj['type'].upper()}]\n{text}\n")
    return "".join(parts)


def read_log(filepath):
    """Render a whole transcript, or an error marker if it is unreadable."""
    try:
        return render_conversation(Path(filepath))
    except OSError as e:
        logger.debug("Could not read log %s: %s", filepath, e)
        return "Error reading log"
