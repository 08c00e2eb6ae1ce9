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

"""Optical properties and Planck sources of a gray atmosphere.

A gray atmosphere has a single spectral interval, so every field produced here
has a trailing g-point dimension of size 1.
"""

from typing import TypeAlias

import jax
import jax.numpy as jnp
import numpy as np
from jax_rte import constants
from jax_rte import mesh_orientation
from jax_rte import optical_props
from jax_rte.config import rte_config

Array: TypeAlias = jax.Array
MeshOrientation: TypeAlias = mesh_orientation.MeshOrientation


def _layer_dp(p_lev: Array) -> Array:
  """Pressure thickness of every layer, regardless of the orientation."""
  return jnp.abs(p_lev[:, 1:] - p_lev[:, :-1])


def _planck_source(t: Array) -> Array:
  return constants.STEFAN_BOLTZMANN * t**4 / np.pi


class GrayAtmosphereOptics:
  """Implementation of the gray atmosphere optics scheme."""

  def __init__(self, cfg: rte_config.GrayAtmosphereOptics):
    self._p0 = cfg.p0
    self._alpha = cfg.alpha
    self._d0_lw = cfg.d0_lw
    self._d0_sw = cfg.d0_sw

  def _reference_pressure(self, mo: MeshOrientation, p_lev: Array) -> Array:
    """The (ncol, 1) reference pressure, by default the surface pressure."""
    if self._p0 > 0:
      return jnp.full((p_lev.shape[0], 1), self._p0, dtype=p_lev.dtype)
    return p_lev[:, mo.bottom_index, jnp.newaxis]

  def compute_lw_optical_props(
      self,
      mo: MeshOrientation,
      p_lay: Array,
      p_lev: Array,
      two_stream: bool = False,
  ) -> optical_props.OneScalar | optical_props.TwoStream:
    """Compute longwave optical properties based on pressure and lapse rate.

    See Schneider 2004, J. Atmos. Sci. (2004) 61 (12): 1317–1340.
    DOI: https://doi.org/10.1175/1520-0469(2004)061<1317:TTATTS>2.0.CO;2
    To obtain the local optical depth of the layer, the expression for
    cumulative optical depth (from the top of the atmosphere to an arbitrary
    pressure level) was differentiated with respect to the pressure and
    multiplied by the pressure difference across the layer.

    Args:
      mo: The vertical orientation of the columns.
      p_lay: The (ncol, nlay) pressure at the layer centers [Pa].
      p_lev: The (ncol, nlev) pressure at the levels [Pa].
      two_stream: If True, return two-stream optical properties with zero
        single-scattering albedo and asymmetry factor.

    Returns:
      The optical properties, with a single g-point.
    """
    p0 = self._reference_pressure(mo, p_lev)
    alpha, d0_lw = self._alpha, self._d0_lw
    dp = _layer_dp(p_lev)
    tau = jnp.abs(alpha * d0_lw * (p_lay / p0) ** alpha / p_lay * dp)
    tau = tau[..., jnp.newaxis]
    if two_stream:
      return optical_props.TwoStream(
          tau=tau, ssa=jnp.zeros_like(tau), g=jnp.zeros_like(tau)
      )
    return optical_props.OneScalar(tau=tau)

  def compute_sw_optical_props(
      self, mo: MeshOrientation, p_lay: Array, p_lev: Array
  ) -> optical_props.TwoStream:
    """Compute the shortwave optical properties of a gray atmosphere.

    See O'Gorman 2008, Journal of Climate Vol 21, Page(s): 3815–3832.
    DOI: https://doi.org/10.1175/2007JCLI2065.1. In particular, the cumulative
    optical depth expression shown in equation 3 inside the exponential is
    differentiated with respect to pressure and scaled by the pressure
    difference across the layer.

    Args:
      mo: The vertical orientation of the columns.
      p_lay: The (ncol, nlay) pressure at the layer centers [Pa].
      p_lev: The (ncol, nlev) pressure at the levels [Pa].

    Returns:
      The two-stream optical properties of the purely absorbing atmosphere,
      with a single g-point.
    """
    p0 = self._reference_pressure(mo, p_lev)
    tau = jnp.abs(2 * self._d0_sw * (p_lay / p0) * (_layer_dp(p_lev) / p0))
    tau = tau[..., jnp.newaxis]
    return optical_props.TwoStream(
        tau=tau, ssa=jnp.zeros_like(tau), g=jnp.zeros_like(tau)
    )

  def compute_lw_sources(
      self, t_lay: Array, t_lev: Array, t_sfc: Array
  ) -> optical_props.SourceFuncLongWave:
    """Compute the Planck sources used in the longwave problem.

    The computation is based on Stefan-Boltzmann's law, which states that the
    thermal radiation emitted from a blackbody is directly proportional to the
    4-th power of its absolute temperature.

    Args:
      t_lay: The (ncol, nlay) temperature at the layer centers [K].
      t_lev: The (ncol, nlev) temperature at the levels [K].
      t_sfc: The (ncol,) surface temperature [K].

    Returns:
      The Planck sources [W/m^2/sr], with a single g-point.
    """
    src_lev = _planck_source(t_lev)[..., jnp.newaxis]
    return optical_props.SourceFuncLongWave(
        lay_source=_planck_source(t_lay)[..., jnp.newaxis],
        lev_source_inc=src_lev[:, 1:],
        lev_source_dec=src_lev[:, :-1],
        sfc_source=_planck_source(t_sfc)[:, jnp.newaxis],
    )
