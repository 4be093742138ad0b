"""
Tests for resistor value formatting.

Validates:
1. RKM codes (4K7, 13K, 1R5)
2. Engineering notation with SI prefixes
3. Match block rendering
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from resistor_calc.calc import RSet
from resistor_calc.formatting import engineering_notation, format_matches, format_values, rkm_code


class TestRKMCode:
    """Test RKM code formatting."""

    @pytest.mark.parametrize("value,expected", [
        (13000.0, '13K'),
        (4700.0, '4K7'),
        (1.5, '1R5'),
        (100.0, '100R'),
        (2200000.0, '2M2'),
        (1000.0, '1K'),
        (910.0, '910R'),
    ])
    def test_codes(self, value, expected):
        assert rkm_code(value) == expected


class TestEngineeringNotation:
    """Test engineering notation formatting."""

    def test_kilohms(self):
        assert engineering_notation(1000) == '1kΩ'
        assert engineering_notation(4700) == '4.7kΩ'

    def test_megohms(self):
        assert engineering_notation(1.2e6) == '1.2MΩ'

    def test_ohms(self):
        assert engineering_notation(47) == '47Ω'

    def test_milliohms(self):
        assert engineering_notation(0.47) == '470mΩ'

    def test_zero(self):
        assert engineering_notation(0) == '0Ω'

    def test_custom_unit(self):
        assert engineering_notation(2200, unit='') == '2.2k'


class TestMatchRendering:
    """Test result rendering."""

    def test_format_values(self):
        pairs = [('R1', 13000.0), ('R2', 15000.0)]
        assert format_values(pairs) == 'R1: 13K, R2: 15K'
        assert format_values(pairs, notation='eng') == 'R1: 13kΩ, R2: 15kΩ'

    def test_unknown_notation(self):
        with pytest.raises(ValueError):
            format_values([('R1', 1.0)], notation='roman')

    def test_match_blocks(self):
        rset = RSet((13000.0, 15000.0, 2000.0), ('R1', 'R2', 'R3'))
        text = format_matches([(0.0, rset)])
        assert text == "Match 1:\nError: 0.000\nValues: R1: 13K, R2: 15K, R3: 2K\n"

    def test_rset_str(self):
        rset = RSet((4700.0, 1.5), ('R1', 'R2'))
        assert str(rset) == 'R1: 4K7, R2: 1R5'
