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

"""Configuration for the radiative transfer solver."""

import dataclasses

from absl import logging
import dataclasses_json  # Used for JSON serialization.
from etils import epath
import jax
from jax_rte import constants

_CFG_FILENAME = 'rte_cfg.json'


@dataclasses.dataclass(frozen=True, kw_only=True)
class RteConfig(dataclasses_json.DataClassJsonMixin):
  """Parameters of the radiative transfer solvers."""

  # Number of Gaussian quadrature angles used by the longwave no-scattering
  # solver, between 1 and 4. A single angle uses the diffusivity secant 1.66.
  n_gauss_angles: int = 1
  # If True, use jax.lax.scan instead of for loop for the layer recurrences.
  use_scan: bool = False
  # If True, the drivers check that the optical properties are within their
  # physical range before solving. This check is done on the host and cannot be
  # used inside a jitted function.
  check_values: bool = True

  def __post_init__(self):
    if not 1 <= self.n_gauss_angles <= constants.MAX_GAUSS_ANGLES:
      raise ValueError(
          f'Unsupported number of Gaussian angles: {self.n_gauss_angles}.  Must'
          f' be between 1 and {constants.MAX_GAUSS_ANGLES}.'
      )


@dataclasses.dataclass(frozen=True, kw_only=True)
class GrayAtmosphereOptics(dataclasses_json.DataClassJsonMixin):
  """Parameters for gray atmosphere optics."""

  # Reference surface pressure. If 0, the pressure at the bottom of every
  # column is used instead.
  p0: float = 1e5
  # The ratio of the pressure scale height to the partial-pressure scale height
  # of the infrared absorber.
  alpha: float = 3.5
  # Longwave optical depth of the entire gray atmosphere.
  d0_lw: float = 0.0
  # Shortwave optical depth of the entire gray atmosphere.
  d0_sw: float = 0.0

  def __post_init__(self):
    if self.p0 < 0:
      raise ValueError(f'Reference pressure p0 must be >= 0, got {self.p0}.')
    if self.alpha <= 0:
      raise ValueError(f'alpha must be positive, got {self.alpha}.')
    for name, d0 in (('d0_lw', self.d0_lw), ('d0_sw', self.d0_sw)):
      if d0 < 0:
        raise ValueError(f'{name} must be non-negative, got {d0}.')


@dataclasses.dataclass(frozen=True, kw_only=True)
class RadiativeTransfer(dataclasses_json.DataClassJsonMixin):
  """Parameters of a radiative transfer calculation."""

  rte: RteConfig = dataclasses.field(default_factory=RteConfig)
  # Gray atmosphere optics, if the optical properties are computed by the
  # gray atmosphere model rather than provided by an external optics library.
  gray_optics: GrayAtmosphereOptics | None = None


def _should_write_file() -> bool:
  """Returns True if this process should write a file."""
  # For multihost, ensure only one host saves the config.
  return jax.process_index() == 0


def save_json(cfg: RadiativeTransfer, output_dir: str):
  """Save a RadiativeTransfer config to a JSON file."""
  if not _should_write_file():
    return

  logging.info('Saving radiative transfer config in json format')
  dirpath = epath.Path(output_dir)
  dirpath.mkdir(mode=0o775, parents=True, exist_ok=True)
  filepath = dirpath / _CFG_FILENAME
  filepath.write_text(cfg.to_json(indent=2))


def load_json(output_dir: str) -> RadiativeTransfer:
  """Load a RadiativeTransfer config from a JSON file."""
  path = epath.Path(output_dir) / _CFG_FILENAME
  logging.info('Loading radiative transfer config from %s', path)
  return RadiativeTransfer.from_json(path.read_text())
