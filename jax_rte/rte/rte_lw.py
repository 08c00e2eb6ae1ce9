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

"""Longwave radiative transfer driver."""

from typing import TypeAlias

from absl import logging
import jax
import jax.numpy as jnp
from jax_rte import mesh_orientation
from jax_rte import optical_props
from jax_rte.config import rte_config
from jax_rte.rte import boundary_conditions
from jax_rte.rte import fluxes
from jax_rte.rte import solvers

Array: TypeAlias = jax.Array
StatesMap: TypeAlias = dict[str, Array]


def rte_lw(
    optics: optical_props.OneScalar | optical_props.TwoStream,
    top_at_1: bool,
    source: optical_props.SourceFuncLongWave,
    sfc_emis: Array,
    inc_flux: Array | None = None,
    cfg: rte_config.RteConfig | None = None,
) -> StatesMap:
  """Computes the longwave fluxes of a set of columns.

  Non-scattering optical properties are solved with Gaussian quadrature over
  `cfg.n_gauss_angles` angles; two-stream optical properties are solved with
  the adding method.

  Args:
    optics: The (ncol, nlay, ngpt) optical properties.
    top_at_1: Whether the top of the atmosphere is at the first vertical index.
    source: The Planck sources.
    sfc_emis: The (ncol, ngpt) surface emissivity.
    inc_flux: The optional (ncol, ngpt) flux incident at the top of the
      atmosphere. If None, no flux enters the domain from above.
    cfg: The solver configuration; the default configuration is used if None.

  Returns:
    A dictionary containing the (ncol, nlev, ngpt) g-point fluxes 'gpt_flux_up'
    and 'gpt_flux_dn', and the (ncol, nlev) broadband 'flux_up', 'flux_down'
    and 'flux_net' [W/m^2].

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
  source.check_extents(optics.shape)
  optical_props.check_surface_field('sfc_emis', sfc_emis, ncol, ngpt)
  if inc_flux is not None:
    optical_props.check_surface_field('inc_flux', inc_flux, ncol, ngpt)

  if cfg.check_values:
    optics.check_values()
    optical_props.check_range('sfc_emis', sfc_emis, 0.0, 1.0)

  mo = mesh_orientation.MeshOrientation.create(top_at_1, nlay)
  flux_down = boundary_conditions.apply_bc(
      jnp.zeros((ncol, mo.nlev, ngpt), dtype=optics.tau.dtype),
      mo.top_index,
      inc_flux,
  )

  # TwoStream is a subclass of OneScalar and must be matched first.
  if isinstance(optics, optical_props.TwoStream):
    logging.info(
        'Longwave two-stream solver: ncol=%d, nlay=%d, ngpt=%d.',
        ncol,
        nlay,
        ngpt,
    )
    gpt_fluxes = solvers.lw_solver_2stream(
        mo, optics, source, sfc_emis, flux_down, cfg.use_scan
    )
  else:
    logging.info(
        'Longwave no-scattering solver with %d angle(s): ncol=%d, nlay=%d,'
        ' ngpt=%d.',
        cfg.n_gauss_angles,
        ncol,
        nlay,
        ngpt,
    )
    gpt_fluxes = solvers.lw_solver_noscat_gauss_quad(
        mo,
        cfg.n_gauss_angles,
        optics.tau,
        source,
        sfc_emis,
        flux_down,
        cfg.use_scan,
    )

  output = {
      'gpt_flux_up': gpt_fluxes['flux_up'],
      'gpt_flux_dn': gpt_fluxes['flux_down'],
  }
  output.update(
      fluxes.reduce_broadband(gpt_fluxes['flux_up'], gpt_fluxes['flux_down'])
  )
  return output
