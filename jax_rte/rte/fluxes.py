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

"""Reduction of g-point fluxes and the radiative heating rate."""

from typing import Sequence, TypeAlias

import jax
import jax.numpy as jnp
from jax_rte import constants
from jax_rte import mesh_orientation

Array: TypeAlias = jax.Array
MeshOrientation: TypeAlias = mesh_orientation.MeshOrientation
StatesMap: TypeAlias = dict[str, Array]


def reduce_broadband(
    flux_up: Array,
    flux_down: Array,
    flux_down_dir: Array | None = None,
) -> StatesMap:
  """Sums the (ncol, nlev, ngpt) g-point fluxes over the spectrum.

  Args:
    flux_up: The upwelling g-point flux.
    flux_down: The downwelling g-point flux.
    flux_down_dir: The optional direct-beam downwelling g-point flux.

  Returns:
    A dictionary with the (ncol, nlev) broadband 'flux_up', 'flux_down' and
    'flux_net' (downward positive), and 'flux_down_dir' if it was provided.
  """
  output = {
      'flux_up': jnp.sum(flux_up, axis=-1),
      'flux_down': jnp.sum(flux_down, axis=-1),
  }
  output['flux_net'] = output['flux_down'] - output['flux_up']
  if flux_down_dir is not None:
    output['flux_down_dir'] = jnp.sum(flux_down_dir, axis=-1)
  return output


def _check_band_lims(band_lims_gpt: Sequence[tuple[int, int]], ngpt: int):
  """Bands are contiguous, non-empty and within the g-point range."""
  for ibnd, (start, end) in enumerate(band_lims_gpt):
    if not 0 <= start <= end < ngpt:
      raise ValueError(
          f'Band {ibnd} has g-point limits ({start}, {end}), which are not'
          f' within [0, {ngpt - 1}].'
      )
    if ibnd > 0 and start != band_lims_gpt[ibnd - 1][1] + 1:
      raise ValueError(
          f'Band {ibnd} has g-point limits ({start}, {end}), which do not'
          f' follow the previous band ending at {band_lims_gpt[ibnd - 1][1]}.'
      )


def reduce_by_band(
    flux_up: Array,
    flux_down: Array,
    band_lims_gpt: Sequence[tuple[int, int]],
    flux_down_dir: Array | None = None,
) -> StatesMap:
  """Sums the g-point fluxes within each band.

  Args:
    flux_up: The (ncol, nlev, ngpt) upwelling g-point flux.
    flux_down: The (ncol, nlev, ngpt) downwelling g-point flux.
    band_lims_gpt: The first and last g-point (both inclusive) of each band.
    flux_down_dir: The optional direct-beam downwelling g-point flux.

  Returns:
    A dictionary with the (ncol, nlev, nband) band fluxes 'bnd_flux_up',
    'bnd_flux_down', 'bnd_flux_net', and 'bnd_flux_down_dir' if the direct-beam
    flux was provided.
  """
  _check_band_lims(band_lims_gpt, flux_up.shape[-1])

  def by_band(f: Array) -> Array:
    bands = [
        jnp.sum(f[..., start : end + 1], axis=-1)
        for start, end in band_lims_gpt
    ]
    return jnp.stack(bands, axis=-1)

  output = {
      'bnd_flux_up': by_band(flux_up),
      'bnd_flux_down': by_band(flux_down),
  }
  output['bnd_flux_net'] = output['bnd_flux_down'] - output['bnd_flux_up']
  if flux_down_dir is not None:
    output['bnd_flux_down_dir'] = by_band(flux_down_dir)
  return output


def compute_heating_rate(
    mo: MeshOrientation,
    flux_net: Array,
    p_lev: Array,
) -> Array:
  """Computes the layer heating rate from the net flux at the levels.

  The difference of the downward net flux entering a layer through its top
  edge and leaving through its bottom edge is the radiative energy absorbed by
  the layer. Dividing by the mass of the layer per unit area, dp / g, and by
  the heat capacity gives the heating rate.

  Args:
    mo: The vertical orientation of the columns.
    flux_net: The (ncol, nlev) net flux, positive downward [W/m²].
    p_lev: The (ncol, nlev) pressure at the levels [Pa].

  Returns:
    The (ncol, nlay) heating rate of the layers [K/s].
  """
  dflux = mo.layer_top_values(flux_net) - mo.layer_bottom_values(flux_net)
  dp = mo.layer_bottom_values(p_lev) - mo.layer_top_values(p_lev)
  return constants.G * dflux / dp / constants.CP_D
