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

"""Vertical orientation of the layered atmosphere.

The data of a column can be stored with the top of the atmosphere at the first
vertical index (`top_at_1`) or at the last one. All the index arithmetic needed
by the transport routines is derived once from that flag, so that the
recurrences can be written a single time and traverse the arrays in the right
order for either layout.

Conventions: the vertical dimension is axis 1. Layer `j` is bounded by levels
`j` and `j + 1`, so a column with `nlay` layers has `nlay + 1` levels.
"""

import dataclasses
from typing import TypeAlias

import jax
import jax.numpy as jnp

Array: TypeAlias = jax.Array


@dataclasses.dataclass(frozen=True, kw_only=True)
class MeshOrientation:
  """Index primitives for traversing a column in either orientation."""

  top_at_1: bool
  nlay: int
  # Index increment when moving downward, toward the surface.
  step: int
  # 0 when the top is at the first index, 1 otherwise. Layer `j` has its top
  # edge at level `j + offset` and its bottom edge at level `j + 1 - offset`.
  offset: int
  # Level index of the top of the domain.
  top_index: int
  # Level index of the bottom of the domain (the surface).
  bottom_index: int
  # All levels but the top one, ordered from the top toward the surface.
  level_range_fwd: range
  # All levels but the bottom one, ordered from the surface toward the top.
  level_range_rev: range
  # All layers, ordered from the top toward the surface.
  layer_range_fwd: range
  # All layers, ordered from the surface toward the top.
  layer_range_rev: range

  @classmethod
  def create(cls, top_at_1: bool, nlay: int) -> 'MeshOrientation':
    """Derives the orientation primitives for a column of `nlay` layers."""
    nlev = nlay + 1
    if top_at_1:
      return cls(
          top_at_1=True,
          nlay=nlay,
          step=1,
          offset=0,
          top_index=0,
          bottom_index=nlay,
          level_range_fwd=range(1, nlev),
          level_range_rev=range(nlev - 2, -1, -1),
          layer_range_fwd=range(nlay),
          layer_range_rev=range(nlay - 1, -1, -1),
      )
    return cls(
        top_at_1=False,
        nlay=nlay,
        step=-1,
        offset=1,
        top_index=nlay,
        bottom_index=0,
        level_range_fwd=range(nlev - 2, -1, -1),
        level_range_rev=range(1, nlev),
        layer_range_fwd=range(nlay - 1, -1, -1),
        layer_range_rev=range(nlay),
    )

  @property
  def nlev(self) -> int:
    return self.nlay + 1

  def layer_top_level(self, ilay: int) -> int:
    """Level index at the top edge of layer `ilay`."""
    return ilay + self.offset

  def layer_bottom_level(self, ilay: int) -> int:
    """Level index at the bottom edge of layer `ilay`."""
    return ilay + 1 - self.offset

  def layer_above(self, ilev: int) -> int:
    """Index of the layer directly above level `ilev`."""
    return ilev - 1 + self.offset

  def layer_below(self, ilev: int) -> int:
    """Index of the layer directly below level `ilev`."""
    return ilev - self.offset

  def layer_top_values(self, f_lev: Array) -> Array:
    """Values of a level field at the top edge of every layer."""
    return f_lev[:, self.offset : self.nlay + self.offset]

  def layer_bottom_values(self, f_lev: Array) -> Array:
    """Values of a level field at the bottom edge of every layer."""
    return f_lev[:, 1 - self.offset : self.nlev - self.offset]

  def insert_level(
      self, f_lay: Array, boundary_value: Array, level_index: int
  ) -> Array:
    """Builds a level field from per-layer values and one boundary value.

    Args:
      f_lay: A (ncol, nlay) field holding, for every layer, the value at the
        edge that is not `level_index`.
      boundary_value: A (ncol,) field for the boundary level.
      level_index: Either `top_index` or `bottom_index`.

    Returns:
      The (ncol, nlev) level field.
    """
    boundary_value = jnp.expand_dims(boundary_value, axis=1)
    if level_index == 0:
      return jnp.concatenate([boundary_value, f_lay], axis=1)
    return jnp.concatenate([f_lay, boundary_value], axis=1)
