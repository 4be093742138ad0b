"""
Human-readable rendering of resistor values and ranked results.

Two notations are supported:
    RKM code (IEC 60062):   4K7, 13K, 1R5, 2M2
    Engineering notation:   4.7kΩ, 13kΩ, 1.5Ω, 2.2MΩ
"""

from typing import Iterable, List, Tuple

OHM = 'Ω'

# SI prefix table
_SI_PREFIXES = [
    (1e-3, 'm'),
    (1e0,  ''),
    (1e3,  'k'),
    (1e6,  'M'),
    (1e9,  'G'),
]

_RKM_STEPS = [
    (1e6, 'M'),
    (1e3, 'K'),
]


def _shortest(value: float) -> str:
    text = repr(float(value))
    return text[:-2] if text.endswith('.0') else text


def rkm_code(value: float) -> str:
    """
    Format a resistance as an RKM code, the letter standing in for the
    decimal point.

    Examples:
        rkm_code(13000)   → '13K'
        rkm_code(4700)    → '4K7'
        rkm_code(1.5)     → '1R5'
        rkm_code(2200000) → '2M2'
    """
    unit = 'R'
    scaled = value
    for scale, letter in _RKM_STEPS:
        if abs(value) >= scale:
            unit = letter
            scaled = value / scale
            break
    text = _shortest(scaled)
    if '.' in text:
        return text.replace('.', unit)
    return text + unit


def engineering_notation(value: float, unit: str = OHM, precision: int = 3) -> str:
    """
    Format a value in engineering notation with SI prefix.

    Examples:
        engineering_notation(1000)     → '1kΩ'
        engineering_notation(4700)     → '4.7kΩ'
        engineering_notation(0.47)     → '470mΩ'
        engineering_notation(1.2e6)    → '1.2MΩ'
    """
    if value == 0:
        return f"0{unit}"

    abs_value = abs(value)
    sign = '-' if value < 0 else ''

    for scale, prefix in reversed(_SI_PREFIXES):
        if abs_value >= scale:
            scaled = abs_value / scale
            if scaled == int(scaled):
                return f"{sign}{int(scaled)}{prefix}{unit}"
            return f"{sign}{scaled:.{precision}g}{prefix}{unit}"

    return f"{value:.{precision}g}{unit}"


def format_values(pairs: Iterable[Tuple[str, float]], notation: str = 'rkm', sep: str = ', ') -> str:
    """Render name/value pairs as 'R1: 13K, R2: 15K'."""
    if notation == 'rkm':
        fmt = rkm_code
    elif notation == 'eng':
        fmt = engineering_notation
    else:
        raise ValueError(f"Unknown notation '{notation}'. Must be 'rkm' or 'eng'")
    return sep.join(f"{name}: {fmt(value)}" for name, value in pairs)


def format_matches(results, notation: str = 'rkm') -> str:
    """
    Render ranked (error, RSet) pairs as numbered match blocks:

        Match 1:
        Error: 0.000
        Values: R1: 13K, R2: 15K, R3: 2K
    """
    blocks: List[str] = []
    for rank, (error, rset) in enumerate(results, start=1):
        values = format_values(zip(rset.names, rset.values), notation=notation)
        blocks.append(f"Match {rank}:\nError: {error:.3f}\nValues: {values}\n")
    return '\n'.join(blocks)
