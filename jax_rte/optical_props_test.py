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
from jax_rte import optical_props

_SHAPE = (2, 3, 4)


class OpticalPropsTest(parameterized.TestCase):

  def test_two_stream_shape(self):
    optics = optical_props.TwoStream(
        tau=jnp.ones(_SHAPE), ssa=jnp.zeros(_SHAPE), g=jnp.zeros(_SHAPE)
    )

    self.assertEqual(optics.shape, _SHAPE)
    optics.check_extents()
    optics.check_values()

  def test_tau_must_be_three_dimensional(self):
    with self.assertRaisesRegex(ValueError, 'tau must be'):
      optical_props.OneScalar(tau=jnp.ones((2, 3))).check_extents()

  @parameterized.parameters('ssa', 'g')
  def test_inconsistent_two_stream_extents_raise(self, name: str):
    fields = dict(
        tau=jnp.ones(_SHAPE), ssa=jnp.zeros(_SHAPE), g=jnp.zeros(_SHAPE)
    )
    fields[name] = jnp.zeros((2, 3, 5))

    with self.assertRaisesRegex(ValueError, f'{name} has shape'):
      optical_props.TwoStream(**fields).check_extents()

  @parameterized.named_parameters(
      ('negative_tau', 'tau', -0.1),
      ('ssa_above_one', 'ssa', 1.1),
      ('negative_ssa', 'ssa', -0.1),
      ('g_below_minus_one', 'g', -1.5),
  )
  def test_out_of_range_values_raise(self, name: str, value: float):
    fields = dict(
        tau=jnp.ones(_SHAPE), ssa=jnp.zeros(_SHAPE), g=jnp.zeros(_SHAPE)
    )
    fields[name] = fields[name].at[1, 2, 3].set(value)

    with self.assertRaisesRegex(ValueError, name):
      optical_props.TwoStream(**fields).check_values()

  def test_source_extents(self):
    ncol, nlay, ngpt = _SHAPE
    source = optical_props.SourceFuncLongWave(
        lay_source=jnp.ones(_SHAPE),
        lev_source_inc=jnp.ones(_SHAPE),
        lev_source_dec=jnp.ones((ncol, nlay + 1, ngpt)),
        sfc_source=jnp.ones((ncol, ngpt)),
    )

    with self.assertRaisesRegex(ValueError, 'lev_source_dec'):
      source.check_extents(_SHAPE)

  def test_surface_field(self):
    optical_props.check_surface_field('sfc_emis', jnp.ones((2, 4)), 2, 4)

    with self.assertRaisesRegex(ValueError, 'sfc_emis has shape'):
      optical_props.check_surface_field('sfc_emis', jnp.ones((4, 2)), 2, 4)


if __name__ == '__main__':
  absltest.main()
