# Copyright 2024 The swirl_jatmos Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Closed-form reflectance and transmittance of a single layer.

Two-stream solutions for diffuse and direct reflectance and transmittance of a
layer with optical depth tau, single-scattering albedo ssa, and asymmetry
factor g, following Meador and Weaver (1980),
doi:10.1175/1520-0469(1980)037<0630:TSATRT>2.0.CO;2.

All the functions here operate pointwise on (ncol, nlay) fields for a single
g-point and never raise; edge cases are handled with numerical floors.

Common symbols:
ssa: single-scattering albedo;
tau: optical depth;
g: asymmetry factor;
mu0: cosine of the solar zenith angle, a (ncol,) field;
gamma: exchange rate coefficient in the radiative transfer equation.
"""

from typing import TypeAlias

import jax
import jax.numpy as jnp
from jax_rte import constants

Array: TypeAlias = jax.Array
StatesMap: TypeAlias = dict[str, Array]

# Lower limit of k^2 = gamma1^2 - gamma2^2. k = 0 for isotropic, conservative
# scattering; this limit gives a relative error with respect to the
# conservative solution of < 0.1% in the reflectance down to tau = 1e-9.
_K_SQUARED_MIN = 1e-12


def noscat_transmissivity(tau: Array, secant: Array) -> Array:
  """Transmissivity of a non-scattering layer along a slant path.

  Args:
    tau: The (ncol, nlay) optical depth.
    secant: The (ncol,) secant of the propagation angle.

  Returns:
    exp(-tau * secant).
  """
  return jnp.exp(-tau * secant[:, jnp.newaxis])


def _k_fn(gamma1: Array, gamma2: Array) -> Array:
  """Eq. 18 of Meador and Weaver, limited below to avoid division by 0."""
  return jnp.sqrt(
      jnp.maximum((gamma1 - gamma2) * (gamma1 + gamma2), _K_SQUARED_MIN)
  )


def _diffuse_r_t(
    gamma1: Array, gamma2: Array, k: Array, tau: Array
) -> tuple[Array, Array, Array, Array, Array]:
  """Diffuse reflectance and transmittance, Eqs. 25 and 26.

  Args:
    gamma1: The coefficient of the parallel irradiance.
    gamma2: The coefficient of the antiparallel irradiance.
    k: The eigenvalue of the two-stream system.
    tau: The optical depth.

  Returns:
    A tuple `(r_diff, t_diff, rt_term, exp_minusktau, exp_minus2ktau)` where
    the last three are shared with the direct-beam solution.
  """
  exp_minusktau = jnp.exp(-tau * k)
  exp_minus2ktau = exp_minusktau * exp_minusktau

  # As in RRTMGP, this expression has been refactored to
  # avoid rounding errors when k, gamma1 are of very different magnitudes.
  rt_term = 1.0 / (k * (1.0 + exp_minus2ktau) + gamma1 * (1.0 - exp_minus2ktau))

  r_diff = rt_term * gamma2 * (1.0 - exp_minus2ktau)
  t_diff = rt_term * 2.0 * k * exp_minusktau
  return r_diff, t_diff, rt_term, exp_minusktau, exp_minus2ktau


def lw_two_stream(tau: Array, ssa: Array, g: Array) -> StatesMap:
  """Longwave two-stream reflectance and transmittance for diffuse radiation.

  The coupling coefficients differ from the shortwave ones because the phase
  function is more isotropic; here we follow Fu et al. (1997),
  doi:10.1175/1520-0469(1997)054<2799:MSPITI>2.0.CO;2.

  Args:
    tau: The (ncol, nlay) optical depth.
    ssa: The (ncol, nlay) single-scattering albedo.
    g: The (ncol, nlay) asymmetry factor.

  Returns:
    A dictionary containing the following items:
      'gamma1': The coefficient of the parallel irradiance.
      'gamma2': The coefficient of the antiparallel irradiance.
      'r_diff': The diffuse reflectance.
      't_diff': The diffuse transmittance.
  """
  # Fu et al. Eqs. 2.9 and 2.10.
  gamma1 = constants.LW_DIFFUSIVITY_SECANT * (1.0 - 0.5 * ssa * (1.0 + g))
  gamma2 = constants.LW_DIFFUSIVITY_SECANT * 0.5 * ssa * (1.0 - g)

  k = _k_fn(gamma1, gamma2)
  r_diff, t_diff, _, _, _ = _diffuse_r_t(gamma1, gamma2, k, tau)
  return {
      'gamma1': gamma1,
      'gamma2': gamma2,
      'r_diff': r_diff,
      't_diff': t_diff,
  }


def sw_two_stream(mu0: Array, tau: Array, ssa: Array, g: Array) -> StatesMap:
  """Shortwave two-stream reflectance and transmittance.

  Exchange rate coefficients follow the Practical Improved Flux Method (PIFM)
  of Zdunkowski et al. (1980), Contributions to Atmospheric Physics 53, 147-66.

  Args:
    mu0: The (ncol,) cosine of the solar zenith angle.
    tau: The (ncol, nlay) optical depth.
    ssa: The (ncol, nlay) single-scattering albedo.
    g: The (ncol, nlay) asymmetry factor.

  Returns:
    A dictionary containing the following items:
      'r_diff': The diffuse reflectance.
      't_diff': The diffuse transmittance.
      'r_dir': The direct-beam reflectance.
      't_dir': The direct-beam transmittance into the diffuse stream; the
        unscattered direct transmittance is not included.
      't_noscat': The transmittance of the direct, unscattered beam.
  """
  mu0 = mu0[:, jnp.newaxis]
  eps = jnp.finfo(tau.dtype).eps

  gamma1 = (8.0 - ssa * (5.0 + 3.0 * g)) * 0.25
  gamma2 = 3.0 * (ssa * (1.0 - g)) * 0.25
  gamma3 = (2.0 - 3.0 * mu0 * g) * 0.25
  gamma4 = 1.0 - gamma3
  alpha1 = gamma1 * gamma4 + gamma2 * gamma3  # Eq. 16.
  alpha2 = gamma1 * gamma3 + gamma2 * gamma4  # Eq. 17.

  k = _k_fn(gamma1, gamma2)
  r_diff, t_diff, rt_term, exp_minusktau, exp_minus2ktau = _diffuse_r_t(
      gamma1, gamma2, k, tau
  )

  t_noscat = jnp.exp(-tau / mu0)

  k_mu = k * mu0
  k_gamma3 = k * gamma3
  k_gamma4 = k * gamma4

  # Equation 14, multiplying top and bottom by exp(-k*tau) and rearranging to
  # avoid division by 0 near 1 - (k mu0)^2 = 0.
  one_minus_kmu_sq = 1.0 - k_mu * k_mu
  direct_term = (
      ssa
      * rt_term
      / jnp.where(jnp.abs(one_minus_kmu_sq) >= eps, one_minus_kmu_sq, eps)
  )

  r_dir = direct_term * (
      (1.0 - k_mu) * (alpha2 + k_gamma3)
      - (1.0 + k_mu) * (alpha2 - k_gamma3) * exp_minus2ktau
      - 2.0 * (k_gamma3 - alpha2 * k_mu) * exp_minusktau * t_noscat
  )

  # Equation 15, multiplying top and bottom by exp(-k*tau), multiplying through
  # by exp(-tau/mu0) to prefer underflow to overflow, and omitting direct
  # transmittance.
  t_dir = -direct_term * (
      (1.0 + k_mu) * (alpha1 + k_gamma4) * t_noscat
      - (1.0 - k_mu) * (alpha1 - k_gamma4) * exp_minus2ktau * t_noscat
      - 2.0 * (k_gamma4 + alpha1 * k_mu) * exp_minusktau
  )

  return {
      'r_diff': r_diff,
      't_diff': t_diff,
      'r_dir': r_dir,
      't_dir': t_dir,
      't_noscat': t_noscat,
  }
