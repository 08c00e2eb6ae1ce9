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

"""Transport of radiation through a vertically layered atmosphere.

The diffuse two-stream transport uses the adding method of Shonk and Hogan
(2008), doi:10.1175/2007JCLI1940.1 (SH08), and is shared by the longwave and
the shortwave. The no-scattering longwave transport and the extinction-only
transport of the direct solar beam are simple sweeps along the column.

All the computations here assume a single g-point. Every sweep follows the
index ranges of a `MeshOrientation`, so the same code serves both vertical
orientations of the data.
"""

from typing import TypeAlias

import jax
import jax.numpy as jnp
from jax_rte import mesh_orientation
from jax_rte.rte import rte_utils

Array: TypeAlias = jax.Array
MeshOrientation: TypeAlias = mesh_orientation.MeshOrientation
StatesMap: TypeAlias = dict[str, Array]


def adding(
    mo: MeshOrientation,
    albedo_sfc: Array,
    r_diff: Array,
    t_diff: Array,
    src_down: Array,
    src_up: Array,
    src_sfc: Array,
    flux_down: Array,
    use_scan: bool = False,
) -> StatesMap:
  """Solves the monochromatic two-stream equation with the adding method.

  Given the downward flux incident at the top of the domain and the upward
  surface source, this computes the upwelling and downwelling diffuse fluxes
  at every level.

  Args:
    mo: The vertical orientation of the column.
    albedo_sfc: The (ncol,) surface albedo for diffuse radiation.
    r_diff: The (ncol, nlay) layer diffuse reflectance.
    t_diff: The (ncol, nlay) layer diffuse transmittance.
    src_down: The (ncol, nlay) downward source at the bottom of every layer.
    src_up: The (ncol, nlay) upward source at the top of every layer.
    src_sfc: The (ncol,) upward source at the surface.
    flux_down: The (ncol, nlev) downward flux. Only the top of the domain is
      read; it holds the incident flux boundary condition.
    use_scan: Whether to use scan or for loops for the recurrent operation.

  Returns:
    A dictionary containing the (ncol, nlev) fluxes:
      'flux_up': The upwelling radiative flux.
      'flux_down': The downwelling radiative flux, with the top of the domain
        equal to the incident flux.
  """
  # Global recurrent accumulation, from the surface to the top of the domain,
  # of the albedo of the atmosphere below each level (alpha in SH08) and of the
  # aggregate upwelling source (G in SH08).

  def albedo_and_source_op(carry, r_diff, t_diff, src_up, src_down):
    albedo_below, src_below = carry
    # Geometric series solution accounting for infinite reflection events.
    denom = 1.0 / (1.0 - r_diff * albedo_below)  # Eq. 10.
    albedo = r_diff + t_diff * t_diff * albedo_below * denom  # Eq. 9.
    # Eq. 11: the source is the upward emission at the top of the layer plus
    # the emission from below and the downward emission of the layer reflected
    # from below, both transmitted through the layer.
    src = src_up + t_diff * denom * (src_below + albedo_below * src_down)
    return (albedo, src), (albedo, src, denom)

  inputs = {
      'r_diff': r_diff,
      't_diff': t_diff,
      'src_up': src_up,
      'src_down': src_down,
  }
  _, (albedo_top, src_top, denom) = rte_utils.layer_recurrence(
      albedo_and_source_op,
      (albedo_sfc, src_sfc),
      inputs,
      mo.layer_range_rev,
      use_scan,
  )
  albedo = mo.insert_level(albedo_top, albedo_sfc, mo.bottom_index)
  src = mo.insert_level(src_top, src_sfc, mo.bottom_index)

  # Global recurrent accumulation of the downwelling flux, from the top of the
  # domain down to the surface (SH08 Eq. 13). The downward flux below a layer
  # combines the flux from above transmitted through the layer, the aggregate
  # upward source from below reflected by the layer, and the downward source
  # of the layer.

  def flux_down_op(
      flux_down_above, t_diff, r_diff, src_down, src_below, denom
  ):
    out = (t_diff * flux_down_above + r_diff * src_below + src_down) * denom
    return out, out  # Carry and output are the same.

  flux_down_top = flux_down[:, mo.top_index]
  flux_down_inputs = {
      't_diff': t_diff,
      'r_diff': r_diff,
      'src_down': src_down,
      'src_below': mo.layer_bottom_values(src),
      'denom': denom,
  }
  _, flux_down_below = rte_utils.layer_recurrence(
      flux_down_op,
      flux_down_top,
      flux_down_inputs,
      mo.layer_range_fwd,
      use_scan,
  )
  flux_down = mo.insert_level(flux_down_below, flux_down_top, mo.top_index)

  # SH08 Eq. 12: the upwelling flux at every level, the top of the domain
  # included, is the reflection of the downwelling flux by the atmosphere below
  # plus the aggregate upward source.
  flux_up = flux_down * albedo + src
  return {'flux_up': flux_up, 'flux_down': flux_down}


def lw_transport_noscat(
    mo: MeshOrientation,
    trans: Array,
    sfc_albedo: Array,
    src_down: Array,
    src_up: Array,
    src_sfc: Array,
    radn_down: Array,
    use_scan: bool = False,
) -> StatesMap:
  """Longwave transport of radiance through non-scattering layers.

  Args:
    mo: The vertical orientation of the column.
    trans: The (ncol, nlay) layer transmissivity.
    sfc_albedo: The (ncol,) surface albedo.
    src_down: The (ncol, nlay) downward source at the bottom of every layer.
    src_up: The (ncol, nlay) upward source at the top of every layer.
    src_sfc: The (ncol,) surface source.
    radn_down: The (ncol, nlev) downward radiance; the top of the domain holds
      the incident boundary condition.
    use_scan: Whether to use scan or for loops for the recurrent operation.

  Returns:
    A dictionary containing the (ncol, nlev) radiances 'radn_up' and
    'radn_down'.
  """

  def propagate_op(radn_in, trans, src):
    radn_out = trans * radn_in + src
    return radn_out, radn_out  # Carry and output are the same.

  # Downward propagation.
  radn_down_top = radn_down[:, mo.top_index]
  radn_down_sfc, radn_down_below = rte_utils.layer_recurrence(
      propagate_op,
      radn_down_top,
      {'trans': trans, 'src': src_down},
      mo.layer_range_fwd,
      use_scan,
  )
  radn_down = mo.insert_level(radn_down_below, radn_down_top, mo.top_index)

  # Surface reflection and emission.
  radn_up_sfc = radn_down_sfc * sfc_albedo + src_sfc

  # Upward propagation.
  _, radn_up_above = rte_utils.layer_recurrence(
      propagate_op,
      radn_up_sfc,
      {'trans': trans, 'src': src_up},
      mo.layer_range_rev,
      use_scan,
  )
  radn_up = mo.insert_level(radn_up_above, radn_up_sfc, mo.bottom_index)
  return {'radn_up': radn_up, 'radn_down': radn_down}


def sw_transport_noscat(
    mo: MeshOrientation,
    tau: Array,
    mu0: Array,
    flux_dir: Array,
    use_scan: bool = False,
) -> Array:
  """Extinction-only transport of the direct solar beam.

  Args:
    mo: The vertical orientation of the column.
    tau: The (ncol, nlay) optical depth.
    mu0: The (ncol,) cosine of the solar zenith angle.
    flux_dir: The (ncol, nlev) direct-beam flux; the top of the domain holds
      the incident boundary condition.
    use_scan: Whether to use scan or for loops for the recurrent operation.

  Returns:
    The (ncol, nlev) direct-beam flux.
  """
  mu0_inv = 1.0 / mu0

  def extinction_op(flux_in, tau):
    flux_out = flux_in * jnp.exp(-tau * mu0_inv)
    return flux_out, flux_out

  flux_dir_top = flux_dir[:, mo.top_index]
  _, flux_dir_below = rte_utils.layer_recurrence(
      extinction_op, flux_dir_top, {'tau': tau}, mo.layer_range_fwd, use_scan
  )
  return mo.insert_level(flux_dir_below, flux_dir_top, mo.top_index)
