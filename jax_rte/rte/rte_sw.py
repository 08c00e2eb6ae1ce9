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

"""Shortwave radiative transfer driver."""

from typing import TypeAlias

from absl import logging
import jax
import jax.numpy as jnp
import numpy as np
from jax_rte import mesh_orientation
from jax_rte import optical_props
from jax_rte.config import rte_config
from jax_rte.rte import boundary_conditions
from jax_rte.rte import fluxes
from jax_rte.rte import solvers

Array: TypeAlias = jax.Array
StatesMap: TypeAlias = dict[str, Array]


def rte_sw(
    optics: optical_props.OneScalar | optical_props.TwoStream,
    top_at_1: bool,
    mu0: Array,
    inc_flux: Array,
    sfc_alb_dir: Array,
    sfc_alb_dif: Array,
    inc_flux_dif: Array | None = None,
    cfg: rte_config.RteConfig | None = None,
) -> StatesMap:
  """Computes the shortwave fluxes of a set of columns.

  Non-scattering optical properties only attenuate the direct beam, so the
  upwelling flux is zero and the downwelling flux is the direct beam.
  Two-stream optical properties are solved with the adding method.

  Args:
    optics: The (ncol, nlay, ngpt) optical properties.
    top_at_1: Whether the top of the atmosphere is at the first vertical index.
    mu0: The (ncol,) cosine of the solar zenith angle.
    inc_flux: The (ncol, ngpt) solar flux incident on a plane normal to the
      beam at the top of the atmosphere.
    sfc_alb_dir: The (ncol, ngpt) surface albedo for direct radiation.
    sfc_alb_dif: The (ncol, ngpt) surface albedo for diffuse radiation.
    inc_flux_dif: The optional (ncol, ngpt) diffuse flux incident at the top of
      the atmosphere. If None, no diffuse flux enters the domain from above.
    cfg: The solver configuration; the default configuration is used if None.

  Returns:
    A dictionary containing the (ncol, nlev, ngpt) g-point fluxes 'gpt_flux_up',
    'gpt_flux_dn' and 'gpt_flux_dn_dir', and the (ncol, nlev) broadband
    'flux_up', 'flux_down', 'flux_net' and 'flux_down_dir' [W/m^2].

  Raises:
    ValueError: If the extents of the inputs are inconsistent, or if
      `cfg.check_values` and an input is outside of its physical range.
  """
  cfg = cfg or rte_config.RteConfig()
  if not isinstance(optics, optical_props.OneScalar):
    raise ValueError(
        f'Unsupported optical properties type: {type(optics).__name__}.'
    )

  optics.check_extents()
  ncol, nlay, ngpt = optics.shape
  if mu0.shape != (ncol,):
    raise ValueError(f'mu0 has shape {mu0.shape}, expected {(ncol,)}.')
  optical_props.check_surface_field('inc_flux', inc_flux, ncol, ngpt)
  optical_props.check_surface_field('sfc_alb_dir', sfc_alb_dir, ncol, ngpt)
  optical_props.check_surface_field('sfc_alb_dif', sfc_alb_dif, ncol, ngpt)
  if inc_flux_dif is not None:
    optical_props.check_surface_field('inc_flux_dif', inc_flux_dif, ncol, ngpt)

  if cfg.check_values:
    optics.check_values()
    optical_props.check_range('mu0', mu0, 0.0, 1.0)
    if np.any(np.asarray(mu0) == 0):
      raise ValueError('mu0 must be positive, with the sun above the horizon.')
    optical_props.check_range('sfc_alb_dir', sfc_alb_dir, 0.0, 1.0)
    optical_props.check_range('sfc_alb_dif', sfc_alb_dif, 0.0, 1.0)

  mo = mesh_orientation.MeshOrientation.create(top_at_1, nlay)
  zeros = jnp.zeros((ncol, mo.nlev, ngpt), dtype=optics.tau.dtype)
  # The direct beam is projected on the vertical.
  flux_dir = boundary_conditions.apply_bc(zeros, mo.top_index, inc_flux, mu0)
  flux_down = boundary_conditions.apply_bc(zeros, mo.top_index, inc_flux_dif)

  # TwoStream is a subclass of OneScalar and must be matched first.
  if isinstance(optics, optical_props.TwoStream):
    logging.info(
        'Shortwave two-stream solver: ncol=%d, nlay=%d, ngpt=%d.',
        ncol,
        nlay,
        ngpt,
    )
    gpt_fluxes = solvers.sw_solver_2stream(
        mo,
        optics,
        mu0,
        sfc_alb_dir,
        sfc_alb_dif,
        flux_down,
        flux_dir,
        cfg.use_scan,
    )
  else:
    logging.info(
        'Shortwave no-scattering solver: ncol=%d, nlay=%d, ngpt=%d.',
        ncol,
        nlay,
        ngpt,
    )
    flux_dir = solvers.sw_solver_noscat(
        mo, optics.tau, mu0, flux_dir, cfg.use_scan
    )
    gpt_fluxes = {
        'flux_up': zeros,
        'flux_down': flux_dir,
        'flux_down_dir': flux_dir,
    }

  output = {
      'gpt_flux_up': gpt_fluxes['flux_up'],
      'gpt_flux_dn': gpt_fluxes['flux_down'],
      'gpt_flux_dn_dir': gpt_fluxes['flux_down_dir'],
  }
  output.update(
      fluxes.reduce_broadband(
          gpt_fluxes['flux_up'],
          gpt_fluxes['flux_down'],
          gpt_fluxes['flux_down_dir'],
      )
  )
  return output
