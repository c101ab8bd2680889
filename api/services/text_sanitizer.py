"""Character filter applied to text bound for the fixed-layout PDF."""

import re
from typing import Optional

# Tab, LF, CR, printable ASCII, pound sign, en dash and em dash.
_DISALLOWED = re.compile("[^\t\n\r\x20-\x7e£–—]")


def sanitize_for_pdf(text: Optional[str]) -> str:
    """Drop characters the standard PDF fonts cannot show and trim the result."""

    if not text:
        return ""
    return _DISALLOWED.sub("", str(text)).strip()
