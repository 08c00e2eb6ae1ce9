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

"""Data classes for the optical properties and sources consumed by the RTE.

Layer fields are (ncol, nlay, ngpt) arrays, level fields are (ncol, nlev, ngpt)
and surface fields are (ncol, ngpt).
"""

import dataclasses
from typing import TypeAlias

import jax
import numpy as np

Array: TypeAlias = jax.Array


@dataclasses.dataclass(frozen=True, kw_only=True)
class OneScalar:
  """Optical properties of non-scattering layers."""

  # Absorption optical depth.
  tau: Array

  @property
  def shape(self) -> tuple[int, int, int]:
    """The (ncol, nlay, ngpt) shape of the layer fields."""
    return self.tau.shape

  def check_extents(self):
    if len(self.tau.shape) != 3:
      raise ValueError(
          f'tau must be a (ncol, nlay, ngpt) array, got shape {self.tau.shape}.'
      )

  def check_values(self):
    """Checks the physical range of the optical properties on the host."""
    if np.any(np.asarray(self.tau) < 0):
      raise ValueError('Optical depth tau must be non-negative.')


@dataclasses.dataclass(frozen=True, kw_only=True)
class TwoStream(OneScalar):
  """Optical properties of scattering layers for the two-stream solvers."""

  # Single-scattering albedo.
  ssa: Array
  # Asymmetry factor.
  g: Array

  def check_extents(self):
    super().check_extents()
    for name, f in (('ssa', self.ssa), ('g', self.g)):
      if f.shape != self.tau.shape:
        raise ValueError(
            f'{name} has shape {f.shape}, inconsistent with the shape of tau'
            f' {self.tau.shape}.'
        )

  def check_values(self):
    super().check_values()
    check_range('ssa', self.ssa, 0.0, 1.0)
    check_range('g', self.g, -1.0, 1.0)


@dataclasses.dataclass(frozen=True, kw_only=True)
class SourceFuncLongWave:
  """Longwave Planck sources [W/m^2/sr].

  Every level shared by two layers has two Planck sources, one computed from
  the spectral mapping of each adjacent layer. They are therefore stored per
  layer: `lev_source_inc` is the source at the increasing-index edge of the
  layer (level j + 1 of layer j), and `lev_source_dec` is the source at its
  decreasing-index edge (level j).
  """

  # Planck source at the layer centers.
  lay_source: Array
  # Planck source at the increasing-index edge of every layer.
  lev_source_inc: Array
  # Planck source at the decreasing-index edge of every layer.
  lev_source_dec: Array
  # Planck source of the surface, a (ncol, ngpt) field.
  sfc_source: Array

  def check_extents(self, shape: tuple[int, int, int]):
    """Checks the sources against the (ncol, nlay, ngpt) optical shape."""
    for name in ('lay_source', 'lev_source_inc', 'lev_source_dec'):
      f = getattr(self, name)
      if f.shape != shape:
        raise ValueError(
            f'{name} has shape {f.shape}, expected {shape}.'
        )
    ncol, _, ngpt = shape
    if self.sfc_source.shape != (ncol, ngpt):
      raise ValueError(
          f'sfc_source has shape {self.sfc_source.shape}, expected'
          f' {(ncol, ngpt)}.'
      )


def check_surface_field(name: str, f: Array, ncol: int, ngpt: int):
  """Checks that a boundary field is (ncol, ngpt)."""
  if f.shape != (ncol, ngpt):
    raise ValueError(
        f'{name} has shape {f.shape}, expected {(ncol, ngpt)}.'
    )


def check_range(name: str, f: Array, lower: float, upper: float):
  """Checks on the host that all the values of `f` are in [lower, upper]."""
  f = np.asarray(f)
  if np.any(f < lower) or np.any(f > upper):
    raise ValueError(f'Values of {name} must be in [{lower}, {upper}].')
