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

"""pytest configuration for the absltest-based test modules."""

from absl import flags
from absl.testing import absltest  # pylint: disable=unused-import


def pytest_configure(config):
  del config  # Unused.
  # Outside of absltest.main() the absl flags, test_tmpdir included, keep their
  # default values.
  flags.FLAGS.mark_as_parsed()
