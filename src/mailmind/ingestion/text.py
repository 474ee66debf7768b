"""Text cleanup helpers shared by the PST and EML parsers."""

import logging
import re

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F]")
_HIGH_LATIN1 = re.compile(r"[\x80-\xFF]")
_HTML_TAG = re.compile(r"<(html|head|meta|body|span|font|div|p|br|table)\b", re.IGNORECASE)

# Korean Outlook archives are frequently cp949 encoded
FALLBACK_ENCODINGS = ("cp949", "euc_kr")

_INJECTED_HEADER_KEYS = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"^stage\s*:",
        r"^from\s*:",
        r"^to\s*:",
        r"^cc\s*:",
        r"^bcc\s*:",
        r"^reply\s*required\s*:",
        r"^date\s*:",
        r"^sent\s*:",
        r"^subject\s*:",
    )
]


def _is_clean(text: str) -> bool:
    return "�" not in text and not _CONTROL_CHARS.search(text)


def decode_text(text: str | None) -> str:
    """Repair a string that was decoded with the wrong charset.

    Strings without replacement or control characters are returned as-is.
    Otherwise the raw bytes are recovered and re-decoded as UTF-8, cp949 and
    euc-kr in turn; the first clean result wins.

    Args:
        text: Possibly mis-decoded text.

    Returns:
        Repaired text, or the input when nothing decodes cleanly.
    """
    if not text:
        return ""
    if _is_clean(text):
        return text

    if "�" in text or _HIGH_LATIN1.search(text):
        raw = bytes(ord(ch) & 0xFF for ch in text)
    else:
        raw = text.encode("utf-8")

    utf8_text = raw.decode("utf-8", errors="replace")
    if _is_clean(utf8_text):
        return utf8_text

    for encoding in FALLBACK_ENCODINGS:
        candidate = raw.decode(encoding, errors="replace")
        if "�" not in candidate:
            return candidate

    return text


def decode_bytes(data: bytes | None, charset: str | None = None) -> str:
    """Decode raw bytes, trying the declared charset, UTF-8 and Korean codepages."""
    if not data:
        return ""

    for encoding in (charset, "utf-8", *FALLBACK_ENCODINGS):
        if not encoding:
            continue
        try:
            return data.decode(encoding)
        except (LookupError, UnicodeDecodeError):
            continue

    return data.decode("utf-8", errors="replace")


def looks_like_html(text: str | None) -> bool:
    """Heuristic HTML detection for message bodies."""
    if not text:
        return False

    stripped = text.strip()
    if stripped.startswith("<!DOCTYPE"):
        return True
    if _HTML_TAG.search(stripped):
        return True
    return "converted from text/rtf" in stripped.lower()


def html_to_text(html: str) -> str:
    """Convert HTML content to plain text.

    Args:
        html: HTML content.

    Returns:
        Plain text content.
    """
    soup = BeautifulSoup(html, "html.parser")

    for element in soup(["script", "style", "img"]):
        element.decompose()

    text = soup.get_text(separator="\n")

    # Clean up whitespace
    lines = (line.strip() for line in text.splitlines())
    return "\n".join(line for line in lines if line)


def strip_injected_header_block(text: str) -> str:
    """Remove a From:/To:/Subject: block some mail gateways prepend to bodies.

    The block is only removed when at least three header-like lines appear
    together within the first fifteen non-blank lines.
    """
    if not text:
        return ""

    normalized = text.replace("\r\n", "\n")
    lines = normalized.split("\n")

    start = 0
    while start < len(lines) and lines[start].strip() == "":
        start += 1

    header_lines = 0
    consumed = 0
    for line in lines[start:start + 15]:
        stripped = line.strip()
        if stripped == "":
            consumed += 1
            break
        if any(key.search(stripped) for key in _INJECTED_HEADER_KEYS):
            header_lines += 1
            consumed += 1
            continue
        break

    if header_lines >= 3:
        rest = lines[start + consumed:]
        while rest and rest[0].strip() == "":
            rest.pop(0)
        return "\n".join(rest).strip()

    return normalized.strip()


def normalize_body(text: str | None) -> str:
    """Strip injected headers and trailing spaces, collapse blank runs."""
    if not text:
        return ""

    text = strip_injected_header_block(text)
    text = "\n".join(re.sub(r"[ \t]+$", "", line) for line in text.split("\n"))
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def extract_sender_from_body(text: str | None) -> str:
    """Find a From:/Sender: line injected at the top of a body."""
    if not text:
        return ""

    text = text.replace("\r\n", "\n").strip()

    match = re.search(r"(?:^|\n)\s*From:\s*([^\n]+)", text, re.IGNORECASE)
    if match:
        return match.group(1).strip()

    match = re.search(
        r"From:\s*(.+?)(?=\s+To:|\s+Cc:|\s+Bcc:|\s+Reply\s*Required:|\s+Date:|\n|$)",
        text,
        re.IGNORECASE,
    )
    if match:
        return match.group(1).strip()

    match = re.search(r"(?:^|\n)\s*Sender:\s*([^\n]+)", text, re.IGNORECASE)
    if match:
        return match.group(1).strip()

    return ""


def extract_sender_from_headers(headers: str | None) -> str:
    """Pull the From: (or Sender:) value out of a raw header block."""
    if not headers:
        return ""

    for name in ("From", "Sender"):
        match = re.search(rf"^{name}:\s*(.+)$", headers, re.IGNORECASE | re.MULTILINE)
        if match and match.group(1).strip():
            return match.group(1).strip()
    return ""


def safe_basename(name: str | None) -> str:
    """Make an attachment name safe to use as a file name."""
    trimmed = (name or "").strip() or "attachment"
    trimmed = re.sub(r"[\\/]", "_", trimmed)
    trimmed = re.sub(r'[:*?"<>|]', "_", trimmed)
    trimmed = re.sub(r"[\x00-\x1F]", "", trimmed)
    return trimmed[:180]
