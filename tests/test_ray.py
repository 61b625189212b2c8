"""Unit tests for the ray module.

Tests cover:
- Ray dataclass and ray_at function
- Vector utility functions (dot, normalize, length, reflect, refract)
- Schlick Fresnel approximation
- Colour guards for non-finite values
- Random sampling functions for Monte Carlo
"""

import math

import numpy as np
import pytest

from aperture.core.ray import (
    Ray,
    black,
    dot,
    is_finite,
    length,
    make_ray,
    near_zero,
    normalize,
    random_unit_vector,
    ray_at,
    reflect,
    refract,
    sanitize_color,
    schlick_fresnel,
    vec3,
)


class TestRayBasics:
    """Tests for Ray dataclass and basic operations."""

    def test_ray_at_origin(self):
        """Test ray_at returns origin when t=0."""
        ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -1.0))
        assert np.allclose(ray_at(ray, 0.0), (1.0, 2.0, 3.0))

    def test_ray_at_positive_t(self):
        """Test ray_at computes correct point along ray."""
        ray = make_ray((0, 0, 0), (1, 0, 0))
        assert np.allclose(ray_at(ray, 5.0), (5.0, 0.0, 0.0))

    def test_ray_at_negative_t(self):
        """Test ray_at handles negative t (behind origin)."""
        ray = make_ray((0, 0, 0), (0, 1, 0))
        assert np.allclose(ray_at(ray, -3.0), (0.0, -3.0, 0.0))

    def test_ray_is_immutable(self):
        """Test that a ray cannot be modified after creation."""
        ray = make_ray((0, 0, 0), (0, 0, 1))
        with pytest.raises(AttributeError):
            ray.origin = vec3(1.0, 1.0, 1.0)

    def test_make_ray_converts_to_float64(self):
        """Test make_ray accepts tuples and produces float64 arrays."""
        ray = make_ray((1, 2, 3), (0, 0, 1))
        assert ray.origin.dtype == np.float64
        assert ray.direction.dtype == np.float64


class TestVectorUtilities:
    """Tests for vector helper functions."""

    def test_dot_product(self):
        """Test dot product of two vectors."""
        assert dot(vec3(1.0, 2.0, 3.0), vec3(4.0, -5.0, 6.0)) == pytest.approx(12.0)

    def test_length(self):
        """Test vector length of a 3-4-0 triangle."""
        assert length(vec3(3.0, 4.0, 0.0)) == pytest.approx(5.0)

    def test_normalize_produces_unit_vector(self):
        """Test normalize returns a unit-length vector in the same direction."""
        v = normalize(vec3(0.0, 3.0, 4.0))
        assert length(v) == pytest.approx(1.0)
        assert np.allclose(v, (0.0, 0.6, 0.8))

    def test_normalize_zero_vector_is_zero(self):
        """Test normalizing the zero vector yields zero instead of NaN."""
        v = normalize(vec3(0.0, 0.0, 0.0))
        assert np.all(v == 0.0)
        assert is_finite(v)

    def test_near_zero(self):
        """Test near_zero threshold."""
        assert near_zero(vec3(1e-9, -1e-9, 0.0))
        assert not near_zero(vec3(1e-3, 0.0, 0.0))

    def test_reflect_normal_incidence(self):
        """Test reflection of a ray hitting the surface head-on."""
        r = reflect(vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))
        assert np.allclose(r, (0.0, 1.0, 0.0))

    def test_reflect_45_degrees(self):
        """Test reflection at 45 degrees keeps the tangential component."""
        incident = normalize(vec3(1.0, -1.0, 0.0))
        r = reflect(incident, vec3(0.0, 1.0, 0.0))
        assert np.allclose(r, normalize(vec3(1.0, 1.0, 0.0)))


class TestRefract:
    """Tests for Snell's law refraction."""

    def test_normal_incidence_passes_straight(self):
        """Test a ray along the normal is not bent."""
        t = refract(vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0), 1.0 / 1.5)
        assert t is not None
        assert np.allclose(t, (0.0, -1.0, 0.0))

    def test_refraction_obeys_snell(self):
        """Test sin(theta_t) = eta * sin(theta_i)."""
        eta = 1.0 / 1.5
        incident = normalize(vec3(1.0, -1.0, 0.0))
        t = refract(incident, vec3(0.0, 1.0, 0.0), eta)
        assert t is not None
        assert length(t) == pytest.approx(1.0)
        sin_i = math.sqrt(0.5)
        sin_t = abs(t[0])
        assert sin_t == pytest.approx(eta * sin_i, abs=1e-9)

    def test_total_internal_reflection_returns_none(self):
        """Test refract reports TIR when sin^2(theta_t) exceeds 1."""
        # Leaving glass (eta = 1.5) at a grazing angle
        incident = normalize(vec3(1.0, -0.1, 0.0))
        assert refract(incident, vec3(0.0, 1.0, 0.0), 1.5) is None


class TestSchlick:
    """Tests for Schlick's Fresnel approximation."""

    def test_normal_incidence_equals_r0(self):
        """Test reflectance at cos=1 equals ((1 - n) / (1 + n))^2."""
        assert schlick_fresnel(1.0, 1.5) == pytest.approx(0.04)

    def test_grazing_incidence_is_total(self):
        """Test reflectance approaches 1 at cos=0."""
        assert schlick_fresnel(0.0, 1.5) == pytest.approx(1.0)

    def test_reflectance_increases_toward_grazing(self):
        """Test reflectance grows monotonically as the angle flattens."""
        values = [schlick_fresnel(c, 1.5) for c in (1.0, 0.8, 0.5, 0.2, 0.0)]
        assert values == sorted(values)


class TestColorGuards:
    """Tests for non-finite colour handling."""

    def test_black_is_zero(self):
        """Test black() returns a fresh zero colour."""
        a = black()
        a[0] = 1.0
        assert np.all(black() == 0.0)

    def test_sanitize_keeps_finite_colour(self):
        """Test finite colours pass through unchanged."""
        c = vec3(2.0, 0.5, 0.0)
        assert np.array_equal(sanitize_color(c), c)

    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
    def test_sanitize_replaces_non_finite(self, bad):
        """Test NaN and infinities become black."""
        assert np.all(sanitize_color(vec3(0.5, bad, 0.5)) == 0.0)


class TestRandomUnitVector:
    """Tests for uniform sphere sampling."""

    def test_unit_length(self):
        """Test samples lie on the unit sphere."""
        rng = np.random.default_rng(5)
        for _ in range(100):
            assert length(random_unit_vector(rng)) == pytest.approx(1.0)

    def test_consumes_two_draws(self, scripted):
        """Test exactly two random numbers are consumed."""
        rng = scripted(0.25, 0.75)
        random_unit_vector(rng)
        assert rng.draws == 2

    def test_scripted_values(self, scripted):
        """Test z = 2 U1 - 1 and phi = 2 pi U2."""
        v = random_unit_vector(scripted(1.0, 0.0))
        assert np.allclose(v, (0.0, 0.0, 1.0))
        v = random_unit_vector(scripted(0.5, 0.25))
        assert np.allclose(v, (0.0, 1.0, 0.0), atol=1e-12)

    def test_mean_is_near_zero(self):
        """Test samples are balanced over the sphere."""
        rng = np.random.default_rng(11)
        samples = np.array([random_unit_vector(rng) for _ in range(4000)])
        assert np.all(np.abs(samples.mean(axis=0)) < 0.05)
