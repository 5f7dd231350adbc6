"""Convert WADL names to Go identifiers.

Pattern: delimiter-separated tokens are joined camel-case style.
  - "_" and "-" are dropped and the following character is upper-cased
  - the first character is upper-cased for exported identifiers,
    lower-cased otherwise

Examples:
  get_pet,   exported=False -> getPet
  get-pet,   exported=True  -> GetPet
  server_id, exported=True  -> ServerId
  getPet + "Params"         -> GetPetParams
"""

from __future__ import annotations

_DELIMITERS = ("_", "-")


def case_first_char(text: str, upper: bool) -> str:
    """Upper- or lower-case the first character of text."""
    if not text:
        return text
    first = text[0].upper() if upper else text[0].lower()
    return first + text[1:]


def render_identifier(name: str, exported: bool) -> str:
    """Render a WADL name as a Go identifier.

    Returns a name like 'getPet' or 'GetPet'.
    """
    for delimiter in _DELIMITERS:
        while True:
            idx = name.find(delimiter)
            if idx < 0:
                break
            name = name[:idx] + case_first_char(name[idx + 1:], True)
    return case_first_char(name, exported)


def params_type_name(stem: str) -> str:
    """Name of the generated parameter struct for a method stem."""
    return render_identifier(f"{stem}Params", True)


def results_type_name(stem: str) -> str:
    """Name of the generated results struct for a method stem."""
    return render_identifier(f"{stem}Results", True)
