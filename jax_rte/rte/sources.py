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

"""Source functions for diffuse radiation in layers and at the surface.

Longwave sources are the Planck emission of the layers, either in the
linear-in-tau two-stream form (Toon et al. 1989) or in the no-scattering form
of Clough et al. (1992). Shortwave sources are the scattering of the direct
solar beam as it is attenuated on its way to the surface.

All the functions here act on a single g-point; fields are (ncol, nlay) for
layers, (ncol, nlev) for levels and (ncol,) at the surface.
"""

import math
from typing import TypeAlias

import jax
import jax.numpy as jnp
from jax_rte import mesh_orientation
from jax_rte.rte import rte_utils

Array: TypeAlias = jax.Array
MeshOrientation: TypeAlias = mesh_orientation.MeshOrientation
StatesMap: TypeAlias = dict[str, Array]

# Minimum longwave optical depth required for a nonzero two-stream source.
_MIN_TAU_FOR_LW_SRC = 1e-8


def lw_combine_sources(lev_source_inc: Array, lev_source_dec: Array) -> Array:
  """Combine the longwave source functions at each level.

  RRTMGP provides two source functions at each level using the spectral
  mapping of each adjacent layer. These are combined here via a geometric mean,
  and the result can be used for two-stream calculations. The two boundary
  levels have a single adjacent layer, whose source is used as is.

  Args:
    lev_source_inc: The (ncol, nlay) Planck source at the increasing-index edge
      of every layer.
    lev_source_dec: The (ncol, nlay) Planck source at the decreasing-index edge
      of every layer.

  Returns:
    The (ncol, nlev) combined Planck source at the levels.
  """
  interior = jnp.sqrt(lev_source_dec[:, 1:] * lev_source_inc[:, :-1])
  return jnp.concatenate(
      [lev_source_dec[:, :1], interior, lev_source_inc[:, -1:]], axis=1
  )


def lw_surface_source(sfc_emis: Array, sfc_src: Array) -> Array:
  """Upward surface emission in flux units."""
  return math.pi * sfc_emis * sfc_src


def lw_source_2str(
    mo: MeshOrientation,
    sfc_emis: Array,
    sfc_src: Array,
    lev_source: Array,
    gamma1: Array,
    gamma2: Array,
    r_diff: Array,
    t_diff: Array,
    tau: Array,
) -> StatesMap:
  """Compute the longwave two-stream layer sources using linear-in-tau.

  The Planck source is assumed to vary linearly with optical depth across the
  layer (Toon et al., JGR 1989, Eqs. 26-27). The source is provided as
  W/m^2/sr; the factor of pi converts to flux units.

  Args:
    mo: The vertical orientation of the column.
    sfc_emis: The surface emissivity.
    sfc_src: The surface Planck source.
    lev_source: The combined Planck source at the levels.
    gamma1: The coefficient of the parallel irradiance.
    gamma2: The coefficient of the antiparallel irradiance.
    r_diff: The layer diffuse reflectance.
    t_diff: The layer diffuse transmittance.
    tau: The layer optical depth.

  Returns:
    A dictionary containing the following items:
      'src_up': The upward emission at the top of every layer.
      'src_down': The downward emission at the bottom of every layer.
      'sfc_src': The upward emission of the surface.
  """
  lev_source_top = mo.layer_top_values(lev_source)
  lev_source_bot = mo.layer_bottom_values(lev_source)

  emitting = tau > _MIN_TAU_FOR_LW_SRC
  # First-order coefficient of the Taylor series expansion of the Planck
  # function in terms of the optical depth.
  denom = jnp.where(emitting, tau * (gamma1 + gamma2), 1.0)
  z = (lev_source_bot - lev_source_top) / denom

  z_up_top = z + lev_source_top
  z_up_bottom = z + lev_source_bot
  z_down_top = -z + lev_source_top
  z_down_bottom = -z + lev_source_bot

  src_up = math.pi * (z_up_top - r_diff * z_down_top - t_diff * z_up_bottom)
  src_down = math.pi * (
      z_down_bottom - r_diff * z_up_bottom - t_diff * z_down_top
  )
  # Below the threshold the layer does not emit, to avoid catastrophic
  # cancellation.
  return {
      'src_up': jnp.where(emitting, src_up, 0.0),
      'src_down': jnp.where(emitting, src_down, 0.0),
      'sfc_src': lw_surface_source(sfc_emis, sfc_src),
  }


def lw_source_noscat(
    lay_source: Array,
    lev_source_up: Array,
    lev_source_dn: Array,
    tau: Array,
    trans: Array,
) -> StatesMap:
  """Compute the longwave sources of non-scattering layers.

  Equation 13 of Clough et al. (1992), doi:10.1029/92JD01419, for the upward
  and downward emission at the layer edges. The weighting factor uses a
  second-order series expansion when the rounding error (~tau^2) is of the
  order of the machine epsilon.

  Args:
    lay_source: The Planck source at the layer centers.
    lev_source_up: The Planck source at the layer edge emitting upward.
    lev_source_dn: The Planck source at the layer edge emitting downward.
    tau: The optical path of every layer (tau times the secant).
    trans: The transmissivity of every layer, exp(-tau).

  Returns:
    A dictionary containing the following items:
      'src_up': The upward radiance emitted at the top of every layer.
      'src_down': The downward radiance emitted at the bottom of every layer.
  """
  tau_thresh = math.sqrt(jnp.finfo(tau.dtype).eps)
  use_exact = tau > tau_thresh
  safe_tau = jnp.where(use_exact, tau, 1.0)
  fact = jnp.where(
      use_exact,
      (1.0 - trans) / safe_tau - trans,
      tau * (0.5 - 1.0 / 3.0 * tau),
  )

  src_down = (1.0 - trans) * lev_source_dn + 2.0 * fact * (
      lay_source - lev_source_dn
  )
  src_up = (1.0 - trans) * lev_source_up + 2.0 * fact * (
      lay_source - lev_source_up
  )
  return {'src_up': src_up, 'src_down': src_down}


def sw_source_2str(
    mo: MeshOrientation,
    r_dir: Array,
    t_dir: Array,
    t_noscat: Array,
    sfc_albedo_dir: Array,
    flux_dir_top: Array,
    use_scan: bool = False,
) -> StatesMap:
  """Compute the direct-beam flux and the shortwave diffuse sources.

  The direct beam is attenuated layer by layer from the top of the domain down
  to the surface. In each layer, the part that is reflected or scattered
  forward becomes a source of diffuse radiation.

  Args:
    mo: The vertical orientation of the column.
    r_dir: The direct-beam reflectance.
    t_dir: The direct-beam transmittance into the diffuse stream.
    t_noscat: The transmittance of the direct, unscattered beam.
    sfc_albedo_dir: The surface albedo for direct radiation.
    flux_dir_top: The direct-beam flux incident at the top of the domain.
    use_scan: Whether to use scan or for loops for the recurrent operation.

  Returns:
    A dictionary containing the following items:
      'src_up': The upward diffuse source at the top of every layer.
      'src_down': The downward diffuse source at the bottom of every layer.
      'sfc_src': The direct beam reflected by the surface.
      'flux_down_dir': The (ncol, nlev) direct-beam flux.
  """

  def op(flux_in, r_dir, t_dir, t_noscat):
    flux_out = t_noscat * flux_in
    return flux_out, (r_dir * flux_in, t_dir * flux_in, flux_out)

  inputs = {'r_dir': r_dir, 't_dir': t_dir, 't_noscat': t_noscat}
  flux_sfc, (src_up, src_down, flux_below) = rte_utils.layer_recurrence(
      op, flux_dir_top, inputs, mo.layer_range_fwd, use_scan
  )
  flux_down_dir = mo.insert_level(flux_below, flux_dir_top, mo.top_index)

  return {
      'src_up': src_up,
      'src_down': src_down,
      'sfc_src': flux_sfc * sfc_albedo_dir,
      'flux_down_dir': flux_down_dir,
  }
