"""Translation between symbolic permission strings and numeric modes.

A permission string has nine characters, three ``rwx`` triplets for
owner, group and other. The execute slot may also carry a special bit:
``s``/``S`` for setuid and setgid in the owner and group triplets, and
``t``/``T`` for the sticky bit in the other triplet. The lowercase
letter means the execute bit is set as well, the uppercase one that it
is not.
"""

from privshell.core.errors import InvalidPermissionFormatError

SETUID = 0o4000
SETGID = 0o2000
STICKY = 0o1000

# (letter, bit) for each of the nine positions
_PERMISSION_BITS: tuple[tuple[str, int], ...] = (
    ("r", 0o400),
    ("w", 0o200),
    ("x", 0o100),
    ("r", 0o040),
    ("w", 0o020),
    ("x", 0o010),
    ("r", 0o004),
    ("w", 0o002),
    ("x", 0o001),
)

# Execute positions that may carry a special bit: index -> (letter, bit)
_SPECIAL_BITS: dict[int, tuple[str, int]] = {
    2: ("s", SETUID),
    5: ("s", SETGID),
    8: ("t", STICKY),
}


def permission_to_mode(permission: str) -> int:
    """Translate a permission string like ``rwxr-x--x`` to a numeric mode.

    Args:
        permission: Nine-character permission string.

    Returns:
        Numeric mode including setuid/setgid/sticky bits.

    Raises:
        InvalidPermissionFormatError: If the string is not nine characters
            long or contains a character not valid at its position.
    """
    if len(permission) != 9:
        msg = f"Permission string must have 9 characters, got {len(permission)}: {permission!r}"
        raise InvalidPermissionFormatError(msg)

    mode = 0
    for index, char in enumerate(permission):
        letter, bit = _PERMISSION_BITS[index]
        if char == "-":
            continue
        if char == letter:
            mode |= bit
            continue
        special = _SPECIAL_BITS.get(index)
        if special is not None:
            special_letter, special_bit = special
            if char == special_letter:
                mode |= bit | special_bit
                continue
            if char == special_letter.upper():
                mode |= special_bit
                continue
        msg = f"Invalid character {char!r} at position {index} of {permission!r}"
        raise InvalidPermissionFormatError(msg)

    return mode


def mode_to_permission(mode: int) -> str:
    """Translate a numeric mode to its nine-character permission string.

    Args:
        mode: Permission bits in the range ``0`` to ``0o7777``.

    Returns:
        Permission string such as ``rwxrws--x``.

    Raises:
        ValueError: If the mode is outside the permission bit range.
    """
    if not 0 <= mode <= 0o7777:
        msg = f"Mode out of range: {mode:o}"
        raise ValueError(msg)

    chars: list[str] = []
    for index, (letter, bit) in enumerate(_PERMISSION_BITS):
        has_bit = bool(mode & bit)
        special = _SPECIAL_BITS.get(index)
        if special is not None and mode & special[1]:
            chars.append(special[0] if has_bit else special[0].upper())
        else:
            chars.append(letter if has_bit else "-")
    return "".join(chars)
