"""Unit tests for emissive materials and the material union."""

import numpy as np
import pytest

from aperture.materials import Diffuse, Emissive, Glass, Metal, Mirror, emitted


class TestEmissive:
    """Tests for light sources."""

    def test_emitted_returns_emission(self):
        """Test emitted() returns the emission as a float array."""
        result = emitted(Emissive((6.0, 5.0, 4.0)))
        assert result.dtype == np.float64
        assert np.allclose(result, (6.0, 5.0, 4.0))

    def test_default_emission_is_white(self):
        """Test the default light emits unit white."""
        assert np.allclose(emitted(Emissive()), (1.0, 1.0, 1.0))

    def test_negative_emission_rejected(self):
        """Test negative emission raises ValueError."""
        with pytest.raises(ValueError):
            Emissive((1.0, -1.0, 1.0))


class TestMaterialValues:
    """Materials are immutable values."""

    @pytest.mark.parametrize(
        "material",
        [Emissive(), Diffuse(), Metal(), Glass(), Mirror()],
    )
    def test_materials_are_frozen(self, material):
        """Test material parameters cannot be reassigned."""
        with pytest.raises(AttributeError):
            material.extra = 1.0

    def test_equal_parameters_compare_equal(self):
        """Test materials compare by value."""
        assert Metal((0.5, 0.5, 0.5), 0.2) == Metal((0.5, 0.5, 0.5), 0.2)
        assert Glass(1.33) != Glass(1.5)
