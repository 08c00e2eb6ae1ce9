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

"""Upper boundary condition of the downward flux."""

from typing import TypeAlias

import jax
import jax.numpy as jnp

Array: TypeAlias = jax.Array


def apply_bc(
    flux_down: Array,
    top_index: int,
    inc_flux: Array | None = None,
    factor: Array | None = None,
) -> Array:
  """Sets the incident flux at the top of the domain.

  The returned field is zero everywhere except at the top level, which holds
  either zero, the incident flux, or the incident flux scaled by a per-column
  factor.

  Args:
    flux_down: A (ncol, nlev, ngpt) downward flux; only its shape and dtype are
      used.
    top_index: The level index of the top of the domain.
    inc_flux: The optional (ncol, ngpt) incident flux at the top of the domain.
    factor: The optional (ncol,) factor multiplying the incident flux, e.g. the
      cosine of the solar zenith angle or a quadrature weight normalization.

  Returns:
    The (ncol, nlev, ngpt) downward flux, to be used as input to the solvers.
  """
  flux_down = jnp.zeros_like(flux_down)
  if inc_flux is None:
    return flux_down
  if factor is not None:
    inc_flux = inc_flux * factor[:, jnp.newaxis]
  return flux_down.at[:, top_index, :].set(inc_flux)
