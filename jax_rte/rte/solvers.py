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

"""Longwave and shortwave radiative transfer solvers.

Each spectral interval, represented by a g-point, is a separate radiative
transfer problem. The monochromatic solvers below wire together the layer
properties, the source functions and the transport for one g-point; the public
solvers map them over the trailing g-point dimension with `jax.vmap`.

Layer fields are (ncol, nlay, ngpt), level fields (ncol, nlev, ngpt) and
surface fields (ncol, ngpt). The top of the domain of every downward flux holds
the incident boundary condition and is read, not overwritten.
"""

import functools
import math
from typing import Callable, TypeAlias

import jax
import jax.numpy as jnp
from jax_rte import constants
from jax_rte import mesh_orientation
from jax_rte import optical_props
from jax_rte.rte import boundary_conditions
from jax_rte.rte import sources
from jax_rte.rte import transport
from jax_rte.rte import two_stream

Array: TypeAlias = jax.Array
MeshOrientation: TypeAlias = mesh_orientation.MeshOrientation
SourceFuncLongWave: TypeAlias = optical_props.SourceFuncLongWave
StatesMap: TypeAlias = dict[str, Array]


def _map_over_gpts(fn: Callable[..., StatesMap], *args: Array) -> StatesMap:
  """Applies a monochromatic solver to every g-point (the last axis)."""
  return jax.vmap(fn, in_axes=-1, out_axes=-1)(*args)


def _lw_solver_noscat_gpt(
    mo: MeshOrientation,
    use_scan: bool,
    secant: Array,
    weight: float,
    tau: Array,
    lay_source: Array,
    lev_source_inc: Array,
    lev_source_dec: Array,
    sfc_source: Array,
    sfc_emis: Array,
    radn_down: Array,
) -> StatesMap:
  """Monochromatic longwave no-scattering solver for a single angle."""
  # Transport is for intensity; convert the flux at the top of the domain to
  # intensity assuming azimuthal isotropy.
  two_pi_w = 2.0 * math.pi * weight
  radn_down = radn_down.at[:, mo.top_index].divide(two_pi_w)

  # Optical path and transmission, used in the source function and transport.
  tau_loc = tau * secant[:, jnp.newaxis]
  trans = two_stream.noscat_transmissivity(tau, secant)

  # The upward emission leaves a layer through its top edge and the downward
  # emission through its bottom edge.
  lev_source_up, lev_source_dn = (
      (lev_source_dec, lev_source_inc),
      (lev_source_inc, lev_source_dec),
  )[mo.offset]
  srcs = sources.lw_source_noscat(
      lay_source, lev_source_up, lev_source_dn, tau_loc, trans
  )

  radn = transport.lw_transport_noscat(
      mo,
      trans,
      1.0 - sfc_emis,
      srcs['src_down'],
      srcs['src_up'],
      sfc_emis * sfc_source,
      radn_down,
      use_scan,
  )

  # Convert intensity to flux assuming azimuthal isotropy and quadrature weight.
  return {
      'flux_up': radn['radn_up'] * two_pi_w,
      'flux_down': radn['radn_down'] * two_pi_w,
  }


def lw_solver_noscat(
    mo: MeshOrientation,
    secant: Array,
    weight: float,
    tau: Array,
    source: SourceFuncLongWave,
    sfc_emis: Array,
    radn_down: Array,
    use_scan: bool = False,
) -> StatesMap:
  """Longwave fluxes of non-scattering layers at a single propagation angle.

  Args:
    mo: The vertical orientation of the columns.
    secant: The (ncol,) secant of the propagation angle.
    weight: The quadrature weight of the angle.
    tau: The absorption optical depth.
    source: The longwave Planck sources.
    sfc_emis: The surface emissivity.
    radn_down: The downward flux; the top of the domain holds the incident
      flux.
    use_scan: Whether to use scan or for loops for the recurrent operation.

  Returns:
    A dictionary with the 'flux_up' and 'flux_down' fluxes for this angle.
  """
  solver = functools.partial(
      _lw_solver_noscat_gpt, mo, use_scan, secant, weight
  )
  return _map_over_gpts(
      solver,
      tau,
      source.lay_source,
      source.lev_source_inc,
      source.lev_source_dec,
      source.sfc_source,
      sfc_emis,
      radn_down,
  )


def lw_solver_noscat_gauss_quad(
    mo: MeshOrientation,
    n_gauss_angles: int,
    tau: Array,
    source: SourceFuncLongWave,
    sfc_emis: Array,
    flux_down: Array,
    use_scan: bool = False,
) -> StatesMap:
  """Longwave fluxes of non-scattering layers with Gaussian quadrature.

  The single-angle solutions are summed over the quadrature angles. The
  incident flux of each angle is scaled by the normalized quadrature weight of
  the angle, so that the accumulated incident flux equals the one supplied.

  Args:
    mo: The vertical orientation of the columns.
    n_gauss_angles: The number of quadrature angles, between 1 and 4.
    tau: The absorption optical depth.
    source: The longwave Planck sources.
    sfc_emis: The surface emissivity.
    flux_down: The downward flux; the top of the domain holds the incident
      flux.
    use_scan: Whether to use scan or for loops for the recurrent operation.

  Returns:
    A dictionary with the 'flux_up' and 'flux_down' fluxes.
  """
  if not 1 <= n_gauss_angles <= constants.MAX_GAUSS_ANGLES:
    raise ValueError(
        f'n_gauss_angles must be between 1 and {constants.MAX_GAUSS_ANGLES},'
        f' got {n_gauss_angles}.'
    )
  secants = constants.GAUSS_DS[n_gauss_angles - 1]
  weights = constants.GAUSS_WTS[n_gauss_angles - 1]
  weight_sum = sum(weights)

  ncol = tau.shape[0]
  inc_flux = flux_down[:, mo.top_index, :]
  fluxes = None
  for secant, weight in zip(secants, weights):
    factor = jnp.full((ncol,), weight / weight_sum, dtype=tau.dtype)
    radn_down = boundary_conditions.apply_bc(
        flux_down, mo.top_index, inc_flux, factor
    )
    radn = lw_solver_noscat(
        mo,
        jnp.full((ncol,), secant, dtype=tau.dtype),
        weight,
        tau,
        source,
        sfc_emis,
        radn_down,
        use_scan,
    )
    # The first angle seeds the accumulator.
    fluxes = radn if fluxes is None else jax.tree.map(jnp.add, fluxes, radn)
  return fluxes


def _lw_solver_2stream_gpt(
    mo: MeshOrientation,
    use_scan: bool,
    tau: Array,
    ssa: Array,
    g: Array,
    lev_source_inc: Array,
    lev_source_dec: Array,
    sfc_source: Array,
    sfc_emis: Array,
    flux_down: Array,
) -> StatesMap:
  """Monochromatic longwave two-stream solver."""
  lev_source = sources.lw_combine_sources(lev_source_inc, lev_source_dec)
  props = two_stream.lw_two_stream(tau, ssa, g)
  srcs = sources.lw_source_2str(
      mo,
      sfc_emis,
      sfc_source,
      lev_source,
      props['gamma1'],
      props['gamma2'],
      props['r_diff'],
      props['t_diff'],
      tau,
  )
  return transport.adding(
      mo,
      1.0 - sfc_emis,
      props['r_diff'],
      props['t_diff'],
      srcs['src_down'],
      srcs['src_up'],
      srcs['sfc_src'],
      flux_down,
      use_scan,
  )


def lw_solver_2stream(
    mo: MeshOrientation,
    optics: optical_props.TwoStream,
    source: SourceFuncLongWave,
    sfc_emis: Array,
    flux_down: Array,
    use_scan: bool = False,
) -> StatesMap:
  """Solves the two-stream radiative transfer equation for the longwave.

  The level Planck sources of adjacent layers are combined, the layer
  reflectance and transmittance are computed from the optical properties, the
  total source at the layer edges is computed with the linear-in-tau
  assumption, and the fluxes are obtained with the adding method.

  Args:
    mo: The vertical orientation of the columns.
    optics: The two-stream optical properties.
    source: The longwave Planck sources.
    sfc_emis: The surface emissivity.
    flux_down: The downward flux; the top of the domain holds the incident
      flux.
    use_scan: Whether to use scan or for loops for the recurrent operation.

  Returns:
    A dictionary with the 'flux_up' and 'flux_down' fluxes [W/m^2].
  """
  solver = functools.partial(_lw_solver_2stream_gpt, mo, use_scan)
  return _map_over_gpts(
      solver,
      optics.tau,
      optics.ssa,
      optics.g,
      source.lev_source_inc,
      source.lev_source_dec,
      source.sfc_source,
      sfc_emis,
      flux_down,
  )


def sw_solver_noscat(
    mo: MeshOrientation,
    tau: Array,
    mu0: Array,
    flux_dir: Array,
    use_scan: bool = False,
) -> Array:
  """Extinction-only shortwave solver for the direct beam.

  Args:
    mo: The vertical orientation of the columns.
    tau: The optical depth.
    mu0: The (ncol,) cosine of the solar zenith angle.
    flux_dir: The direct-beam flux; the top of the domain holds the incident
      flux.
    use_scan: Whether to use scan or for loops for the recurrent operation.

  Returns:
    The direct-beam flux at every level.
  """
  def solver(tau, flux_dir):
    return transport.sw_transport_noscat(mo, tau, mu0, flux_dir, use_scan)

  return jax.vmap(solver, in_axes=-1, out_axes=-1)(tau, flux_dir)


def _sw_solver_2stream_gpt(
    mo: MeshOrientation,
    use_scan: bool,
    mu0: Array,
    tau: Array,
    ssa: Array,
    g: Array,
    sfc_alb_dir: Array,
    sfc_alb_dif: Array,
    flux_down: Array,
    flux_dir: Array,
) -> StatesMap:
  """Monochromatic shortwave two-stream solver."""
  props = two_stream.sw_two_stream(mu0, tau, ssa, g)
  srcs = sources.sw_source_2str(
      mo,
      props['r_dir'],
      props['t_dir'],
      props['t_noscat'],
      sfc_alb_dir,
      flux_dir[:, mo.top_index],
      use_scan,
  )
  fluxes = transport.adding(
      mo,
      sfc_alb_dif,
      props['r_diff'],
      props['t_diff'],
      srcs['src_down'],
      srcs['src_up'],
      srcs['sfc_src'],
      flux_down,
      use_scan,
  )
  # The adding method computes only the diffuse flux; flux_down is total.
  fluxes['flux_down'] = fluxes['flux_down'] + srcs['flux_down_dir']
  fluxes['flux_down_dir'] = srcs['flux_down_dir']
  return fluxes


def sw_solver_2stream(
    mo: MeshOrientation,
    optics: optical_props.TwoStream,
    mu0: Array,
    sfc_alb_dir: Array,
    sfc_alb_dif: Array,
    flux_down: Array,
    flux_dir: Array,
    use_scan: bool = False,
) -> StatesMap:
  """Solves the two-stream radiative transfer equation for the shortwave.

  The sources of diffuse shortwave radiation are determined by the scattering
  of the direct solar beam as it propagates through the layered atmosphere.

  Args:
    mo: The vertical orientation of the columns.
    optics: The two-stream optical properties.
    mu0: The (ncol,) cosine of the solar zenith angle.
    sfc_alb_dir: The surface albedo for direct radiation.
    sfc_alb_dif: The surface albedo for diffuse radiation.
    flux_down: The diffuse downward flux; the top of the domain holds the
      incident diffuse flux.
    flux_dir: The direct-beam flux; the top of the domain holds the incident
      direct flux, already projected on the vertical.
    use_scan: Whether to use scan or for loops for the recurrent operation.

  Returns:
    A dictionary containing the following fluxes [W/m^2]:
      'flux_up': The upwelling flux.
      'flux_down': The total (diffuse plus direct) downwelling flux.
      'flux_down_dir': The direct-beam downwelling flux.
  """
  solver = functools.partial(_sw_solver_2stream_gpt, mo, use_scan, mu0)
  return _map_over_gpts(
      solver,
      optics.tau,
      optics.ssa,
      optics.g,
      sfc_alb_dir,
      sfc_alb_dif,
      flux_down,
      flux_dir,
  )
