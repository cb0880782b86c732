"""
Marginal Densities - Built-in per-dimension target densities.

Every density maps a scalar position to an unnormalised, non-negative
density value and is JAX-traceable. Normalisation constants are irrelevant
to Metropolis-Hastings and are dropped.

Radial nucleon densities include the r^2 volume factor, so sampling them
gives radii of nucleons distributed in 3-D according to the profile.

Parameterized families (gaussian, woods_saxon, ...) return a new function
on every call. Register the result once and reuse it by name: kernels are
compiled per function object.
"""

from functools import partial

import jax.numpy as jnp

from .registry import register_density, list_densities


# ============================================================================
# SIMPLE DENSITIES
# ============================================================================

def standard_normal(x):
    """N(0, 1), unnormalised: exp(-x^2 / 2)."""
    return jnp.exp(-0.5 * x * x)


def _gaussian(x, mu, sigma):
    z = (x - mu) / sigma
    return jnp.exp(-0.5 * z * z)


def gaussian(mu=0.0, sigma=1.0):
    """N(mu, sigma^2), unnormalised."""
    if sigma <= 0:
        raise ValueError(f"sigma must be > 0, got {sigma}")
    return partial(_gaussian, mu=mu, sigma=sigma)


def _uniform_box(x, low, high):
    return jnp.where((x >= low) & (x <= high), 1.0, 0.0)


def uniform_box(low=0.0, high=1.0):
    """
    Uniform on [low, high], zero outside.

    A chain started outside the box sits at zero density; its cached inverse
    density is inf, so the first proposal landing inside is accepted.
    """
    if high <= low:
        raise ValueError(f"high ({high}) must be > low ({low})")
    return partial(_uniform_box, low=low, high=high)


# ============================================================================
# RADIAL NUCLEON DENSITIES
# ============================================================================

def _woods_saxon(r, radius, diffuseness):
    profile = 1.0 / (1.0 + jnp.exp((r - radius) / diffuseness))
    return jnp.where(r >= 0.0, r * r * profile, 0.0)


def woods_saxon(radius, diffuseness):
    """
    Woods-Saxon (Fermi) nuclear density, radial form.

        p(r) = r^2 / (1 + exp((r - R) / a)),  r >= 0
        p(r) = 0,                              r < 0

    Args:
        radius: Half-density radius R (fm)
        diffuseness: Surface thickness a (fm)
    """
    if radius <= 0 or diffuseness <= 0:
        raise ValueError(f"radius and diffuseness must be > 0, got R={radius}, a={diffuseness}")
    return partial(_woods_saxon, radius=radius, diffuseness=diffuseness)


def _exponential_radial(r, scale):
    return jnp.where(r >= 0.0, r * r * jnp.exp(-r / scale), 0.0)


def exponential_radial(scale):
    """
    Exponential (dipole form factor) radial density, r^2 exp(-r / b) for r >= 0.

    <r^2> = 12 b^2, so b = 0.2533 fm reproduces a 0.8775 fm proton radius.
    """
    if scale <= 0:
        raise ValueError(f"scale must be > 0, got {scale}")
    return partial(_exponential_radial, scale=scale)


# ============================================================================
# NAMED DEFAULTS
# ============================================================================

# Woods-Saxon parameters (R, a) in fm
WOODS_SAXON_PARAMS = {
    'cu63': (4.20, 0.596),
    'au197': (6.38, 0.535),
    'pb208': (6.62, 0.546),
}

PROTON_SCALE = 0.2533

BUILTIN_DENSITIES = {
    'standard_normal': standard_normal,
    'uniform_unit': uniform_box(0.0, 1.0),
    'exponential_proton': exponential_radial(PROTON_SCALE),
    **{f'woods_saxon_{name}': woods_saxon(R, a) for name, (R, a) in WOODS_SAXON_PARAMS.items()},
}


def register_builtin_densities():
    """Register every built-in density not already in the registry."""
    registered = set(list_densities())
    for name, density_fn in BUILTIN_DENSITIES.items():
        if name not in registered:
            register_density(name, density_fn)
