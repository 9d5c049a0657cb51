"""
Unit Tests for the Named MODP Groups
"""

import pytest
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / 'python-core'))

from cryptoadapter.groups import GROUP_BITS, STANDARD_GENERATOR, find_group, group_names


class TestGroups:
    """Test cases for group lookup."""

    def test_names(self):
        """Test that every group has a declared size."""
        assert group_names() == ("modp14", "modp15", "modp16", "modp17", "modp18")
        assert set(GROUP_BITS) == set(group_names())

    @pytest.mark.parametrize("name", ["modp14", "modp15", "modp16", "modp17", "modp18"])
    def test_prime_sizes(self, name):
        """Test that each prime has its declared bit length and the top 64 bits set."""
        prime, generator = find_group(name)
        assert prime.bit_length() == GROUP_BITS[name]
        assert prime >> (GROUP_BITS[name] - 64) == 2 ** 64 - 1
        assert prime & (2 ** 64 - 1) == 2 ** 64 - 1
        assert generator == STANDARD_GENERATOR == 2

    def test_case_insensitive(self):
        """Test that lookup ignores case."""
        assert find_group("MODP16") == find_group("modp16")

    def test_unknown(self):
        """Test that unknown names return None."""
        assert find_group("modp2") is None
