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

from absl.testing import absltest
from absl.testing import parameterized
import jax.numpy as jnp
import numpy as np
from jax_rte import constants
from jax_rte import mesh_orientation
from jax_rte import optical_props
from jax_rte.config import rte_config
from jax_rte.optics import gray_atmosphere
from jax_rte.rte import rte_lw

_NLAY = 4


def _pressure(top_at_1: bool) -> tuple[np.ndarray, np.ndarray]:
  """Pressure levels and layer centers of 2 columns, from the surface up."""
  p_lev = np.array([
      [1.0e5, 8.0e4, 6.0e4, 4.0e4, 2.0e4],
      [9.0e4, 7.5e4, 6.0e4, 4.5e4, 3.0e4],
  ])
  p_lay = 0.5 * (p_lev[:, 1:] + p_lev[:, :-1])
  if top_at_1:
    p_lev = p_lev[:, ::-1]
    p_lay = p_lay[:, ::-1]
  return p_lay, p_lev


class GrayAtmosphereOpticsTest(parameterized.TestCase):

  @parameterized.parameters(True, False)
  def test_compute_lw_optical_props(self, top_at_1: bool):
    # SETUP
    cfg = rte_config.GrayAtmosphereOptics(p0=1e5, alpha=3.5, d0_lw=5.0)
    optics = gray_atmosphere.GrayAtmosphereOptics(cfg)
    mo = mesh_orientation.MeshOrientation.create(top_at_1, _NLAY)
    p_lay, p_lev = _pressure(top_at_1)

    # ACTION
    props = optics.compute_lw_optical_props(
        mo, jnp.asarray(p_lay), jnp.asarray(p_lev)
    )

    # VERIFICATION
    self.assertIsInstance(props, optical_props.OneScalar)
    self.assertNotIsInstance(props, optical_props.TwoStream)
    self.assertEqual(props.tau.shape, (2, _NLAY, 1))
    dp = np.abs(np.diff(p_lev, axis=1))
    expected = 3.5 * 5.0 * (p_lay / 1e5) ** 3.5 / p_lay * dp
    np.testing.assert_allclose(props.tau[..., 0], expected, rtol=1e-5)

  def test_lw_optical_depth_uses_surface_pressure_by_default(self):
    # SETUP
    cfg = rte_config.GrayAtmosphereOptics(p0=0.0, alpha=1.0, d0_lw=2.0)
    optics = gray_atmosphere.GrayAtmosphereOptics(cfg)
    mo = mesh_orientation.MeshOrientation.create(False, _NLAY)
    p_lay, p_lev = _pressure(top_at_1=False)

    # ACTION
    props = optics.compute_lw_optical_props(
        mo, jnp.asarray(p_lay), jnp.asarray(p_lev)
    )

    # VERIFICATION
    # With alpha = 1 the optical depth of the whole column is d0 times the
    # fraction of the surface pressure spanned by the levels.
    p_sfc = p_lev[:, 0]
    expected = 2.0 * (p_lev[:, 0] - p_lev[:, -1]) / p_sfc
    np.testing.assert_allclose(
        np.sum(props.tau[..., 0], axis=1), expected, rtol=1e-5
    )

  def test_lw_two_stream_optical_props(self):
    cfg = rte_config.GrayAtmosphereOptics(d0_lw=1.0)
    optics = gray_atmosphere.GrayAtmosphereOptics(cfg)
    mo = mesh_orientation.MeshOrientation.create(True, _NLAY)
    p_lay, p_lev = _pressure(top_at_1=True)

    props = optics.compute_lw_optical_props(
        mo, jnp.asarray(p_lay), jnp.asarray(p_lev), two_stream=True
    )

    self.assertIsInstance(props, optical_props.TwoStream)
    np.testing.assert_array_equal(props.ssa, 0.0)
    np.testing.assert_array_equal(props.g, 0.0)

  @parameterized.parameters(True, False)
  def test_compute_sw_optical_props(self, top_at_1: bool):
    # SETUP
    cfg = rte_config.GrayAtmosphereOptics(p0=1e5, d0_sw=0.22)
    optics = gray_atmosphere.GrayAtmosphereOptics(cfg)
    mo = mesh_orientation.MeshOrientation.create(top_at_1, _NLAY)
    p_lay, p_lev = _pressure(top_at_1)

    # ACTION
    props = optics.compute_sw_optical_props(
        mo, jnp.asarray(p_lay), jnp.asarray(p_lev)
    )

    # VERIFICATION
    dp = np.abs(np.diff(p_lev, axis=1))
    expected = 2 * 0.22 * (p_lay / 1e5) * (dp / 1e5)
    np.testing.assert_allclose(props.tau[..., 0], expected, rtol=1e-5)
    np.testing.assert_array_equal(props.ssa, 0.0)

  def test_compute_lw_sources(self):
    # SETUP
    optics = gray_atmosphere.GrayAtmosphereOptics(
        rte_config.GrayAtmosphereOptics()
    )
    t_lev = np.array([[300.0, 280.0, 260.0]])
    t_lay = np.array([[290.0, 270.0]])
    t_sfc = np.array([305.0])

    # ACTION
    source = optics.compute_lw_sources(
        jnp.asarray(t_lay), jnp.asarray(t_lev), jnp.asarray(t_sfc)
    )

    # VERIFICATION
    def planck(t):
      return constants.STEFAN_BOLTZMANN * t**4 / np.pi

    source.check_extents((1, 2, 1))
    np.testing.assert_allclose(
        source.lay_source[..., 0], planck(t_lay), rtol=1e-5
    )
    np.testing.assert_allclose(
        source.lev_source_inc[..., 0], planck(t_lev[:, 1:]), rtol=1e-5
    )
    np.testing.assert_allclose(
        source.lev_source_dec[..., 0], planck(t_lev[:, :-1]), rtol=1e-5
    )
    np.testing.assert_allclose(
        source.sfc_source, planck(t_sfc)[:, np.newaxis], rtol=1e-5
    )

  def test_transparent_atmosphere_emits_surface_flux_to_space(self):
    # SETUP
    optics = gray_atmosphere.GrayAtmosphereOptics(
        rte_config.GrayAtmosphereOptics(d0_lw=0.0)
    )
    mo = mesh_orientation.MeshOrientation.create(False, _NLAY)
    p_lay, p_lev = _pressure(top_at_1=False)
    t_lev = np.linspace(300.0, 220.0, _NLAY + 1)[np.newaxis, :].repeat(2, 0)
    t_lay = 0.5 * (t_lev[:, 1:] + t_lev[:, :-1])
    t_sfc = np.array([300.0, 290.0])

    # ACTION
    output = rte_lw.rte_lw(
        optics.compute_lw_optical_props(
            mo, jnp.asarray(p_lay), jnp.asarray(p_lev)
        ),
        top_at_1=False,
        source=optics.compute_lw_sources(
            jnp.asarray(t_lay), jnp.asarray(t_lev), jnp.asarray(t_sfc)
        ),
        sfc_emis=jnp.ones((2, 1)),
    )

    # VERIFICATION
    expected = constants.STEFAN_BOLTZMANN * t_sfc**4
    np.testing.assert_allclose(
        output['flux_up'][:, _NLAY], expected, rtol=1e-4
    )
    np.testing.assert_allclose(output['flux_down'], 0.0, atol=1e-4)


if __name__ == '__main__':
  absltest.main()
