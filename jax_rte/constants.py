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

"""Physical and numerical constants used by the radiative transfer solver."""

G = 9.81  # Gravitational acceleration [m/s^2].
R_D = 286.69  # The gas constant for dry air [J/kg/K].
GAMMA = 1.4  # The heat capacity ratio of dry air, dimensionless.
# Constant-pressure heat capacity of dry air [J/kg/K].
CP_D = GAMMA * R_D / (GAMMA - 1)
STEFAN_BOLTZMANN = 5.670374419e-8  # Stefan-Boltzmann constant [W/m^2/K^4].

# Secant of the longwave diffusivity angle per Fu et al. (1997).
LW_DIFFUSIVITY_SECANT = 1.66

# Secants of the Gaussian quadrature angles and their weights for the
# no-scattering longwave solver, indexed as [n_angles - 1][i_angle]. The
# weights of each set sum to 1/2, so that 2π Σw = π converts an isotropic
# radiance into a flux.
GAUSS_DS = (
    (1.66,),
    (1.18350343, 2.81649655),
    (1.09719858, 1.69338507, 4.70941630),
    (1.06056257, 1.38282560, 2.40148179, 7.15513024),
)
GAUSS_WTS = (
    (0.5,),
    (0.3180413817, 0.1819586183),
    (0.2009319137, 0.2292411064, 0.0698269799),
    (0.1355069134, 0.2034645680, 0.1298475476, 0.0311809710),
)
MAX_GAUSS_ANGLES = len(GAUSS_DS)
