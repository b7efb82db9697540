"""
Conversion between US N-Numbers and ModeS codes.

The FAA assigns the ModeS block A00001..ADF7C7 to US civil registrations in
registration order. N-Numbers are laid out as nested buckets: a leading
digit 1-9, up to four more digits, and an optional one or two letter suffix
(letters exclude I and O). Each bucket first holds the registrations that
end with a letter suffix, then one sub-bucket per following digit.
"""

import string
from typing import Optional

from ..models.identifiers import ModeS, NNumber

CHARSET = "ABCDEFGHJKLMNPQRSTUVWXYZ"
DIGITSET = string.digits
ALLCHARS = CHARSET + DIGITSET

# "", "A", "AA".."AZ", "B", ... 1 + 24 * 25
SUFFIX_SIZE = 1 + len(CHARSET) * (len(CHARSET) + 1)
BUCKET4_SIZE = 1 + len(CHARSET) + len(DIGITSET)
BUCKET3_SIZE = len(DIGITSET) * BUCKET4_SIZE + SUFFIX_SIZE
BUCKET2_SIZE = len(DIGITSET) * BUCKET3_SIZE + SUFFIX_SIZE
BUCKET1_SIZE = len(DIGITSET) * BUCKET2_SIZE + SUFFIX_SIZE

US_PREFIX = "A"
US_BLOCK_SIZE = 9 * BUCKET1_SIZE


def _suffix(offset: int) -> str:
    """Letter suffix at an offset inside a bucket's suffix area."""
    if offset == 0:
        return ""
    index, rem = divmod(offset - 1, len(CHARSET) + 1)
    if rem == 0:
        return CHARSET[index]
    return CHARSET[index] + CHARSET[rem - 1]


def _suffix_offset(suffix: str) -> int:
    if not suffix:
        return 0
    count = (len(CHARSET) + 1) * CHARSET.index(suffix[0]) + 1
    if len(suffix) == 2:
        count += CHARSET.index(suffix[1]) + 1
    return count


def mode_s_to_n_number(mode_s: str) -> Optional[str]:
    """
    Convert a ModeS code to its US N-Number.

    Args:
        mode_s: ModeS code in any case

    Returns:
        N-Number such as 'N12345', or None when the code is outside the US block

    Raises:
        InvalidIdentifier: If mode_s is not a ModeS code
    """
    mode_s = ModeS(mode_s)
    if not mode_s.startswith(US_PREFIX):
        return None
    offset = int(mode_s[1:], 16) - 1
    if not 0 <= offset < US_BLOCK_SIZE:
        return None

    digit, rem = divmod(offset, BUCKET1_SIZE)
    output = f"N{digit + 1}"

    for bucket_size in (BUCKET2_SIZE, BUCKET3_SIZE, BUCKET4_SIZE):
        if rem < SUFFIX_SIZE:
            return output + _suffix(rem)
        digit, rem = divmod(rem - SUFFIX_SIZE, bucket_size)
        output += str(digit)

    if rem == 0:
        return output
    return output + ALLCHARS[rem - 1]


def n_number_to_mode_s(n_number: str) -> Optional[str]:
    """
    Convert a US N-Number to its ModeS code.

    Args:
        n_number: N-Number in any case, e.g. 'n12ab'

    Returns:
        Uppercase ModeS code

    Raises:
        InvalidIdentifier: If n_number is not a valid N-Number
    """
    chars = NNumber(n_number)[1:]
    count = (int(chars[0]) - 1) * BUCKET1_SIZE
    rest = chars[1:]

    for bucket_size in (BUCKET2_SIZE, BUCKET3_SIZE, BUCKET4_SIZE):
        if not rest or rest[0] in CHARSET:
            count += _suffix_offset(rest)
            rest = ""
            break
        count += SUFFIX_SIZE + int(rest[0]) * bucket_size
        rest = rest[1:]

    if rest:
        count += ALLCHARS.index(rest[0]) + 1

    mode_s = f"{US_PREFIX}{count + 1:05X}"
    return mode_s if len(mode_s) == 6 else None
