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

"""Utility library for solving the radiative transfer equation (RTE)."""

from typing import Any, Callable, TypeAlias

import jax
import jax.numpy as jnp

Array: TypeAlias = jax.Array
PyTree: TypeAlias = Any


def _check_layer_range(layer_range: range, nlay: int):
  """The recurrences visit every layer exactly once, in either direction."""
  if sorted(layer_range) != list(range(nlay)):
    raise ValueError(
        f'Layer range {layer_range} does not cover all {nlay} layers.'
    )


def recurrent_op(
    f: Callable[..., tuple[PyTree, PyTree]],
    init: PyTree,
    inputs: dict[str, Array],
    layer_range: range,
) -> tuple[PyTree, PyTree]:
  """Compute sequence of recurrent operations over the layers of a column.

  The inputs are (ncol, nlay) fields and the recurrence is run over axis 1 in
  the order given by `layer_range`, which is one of the layer ranges of a
  `MeshOrientation`. This version uses a Python for loop, not scan. The output
  of step `ilay` is stored at layer index `ilay`, regardless of the direction
  of traversal.

  Args:
    f: The recurrent operation to apply, with signature
      `f(carry, **layer_inputs) -> (carry, output)`. Both `carry` and `output`
      may be pytrees of (ncol,) arrays.
    init: The initial state of the recurrent operation.
    inputs: A dictionary of (ncol, nlay) inputs to the recurrent operation.
    layer_range: The order in which the layers are visited.

  Returns:
    A tuple of the final carry state and the accumulated output, where every
    leaf of the output is a (ncol, nlay) array.
  """
  nlay = next(iter(inputs.values())).shape[1]
  _check_layer_range(layer_range, nlay)

  outputs = [None] * nlay
  carry = init
  for ilay in layer_range:
    layer_args = {k: v[:, ilay] for k, v in inputs.items()}
    carry, outputs[ilay] = f(carry, **layer_args)

  output = jax.tree.map(lambda *xs: jnp.stack(xs, axis=1), *outputs)
  return carry, output


def recurrent_op_scan(
    f: Callable[..., tuple[PyTree, PyTree]],
    init: PyTree,
    inputs: dict[str, Array],
    layer_range: range,
) -> tuple[PyTree, PyTree]:
  """Compute sequence of recurrent operations over layers using scan.

  Scan over the vertical dimension (internally transformed to the first
  dimension). Traversing the layers toward decreasing indices is done with
  `reverse=True`, which keeps every output at the index of its layer.

  Note: jax.lax.scan() may be inefficient on GPUs, because each iteration must
  launch a new kernel. May want to use the version with for loops on GPU.

  Args:
    f: The recurrent operation to apply.
    init: The initial state of the recurrent operation.
    inputs: A dictionary of (ncol, nlay) inputs to the recurrent operation.
    layer_range: The order in which the layers are visited.

  Returns:
    A tuple of the final carry state and the accumulated output.
  """
  nlay = next(iter(inputs.values())).shape[1]
  _check_layer_range(layer_range, nlay)

  def wrapped_f_for_scan(carry, inputs):
    return f(carry, **inputs)

  # Move the vertical axis first so that inputs are (nlay, ncol).
  inputs = {k: jnp.moveaxis(v, 1, 0) for k, v in inputs.items()}

  carry, output = jax.lax.scan(
      wrapped_f_for_scan, init, inputs, reverse=layer_range.step < 0
  )

  # Outputs come out of the scan as (nlay, ncol); restore (ncol, nlay).
  output = jax.tree.map(lambda x: jnp.moveaxis(x, 0, 1), output)
  return carry, output


def layer_recurrence(
    f: Callable[..., tuple[PyTree, PyTree]],
    init: PyTree,
    inputs: dict[str, Array],
    layer_range: range,
    use_scan: bool = False,
) -> tuple[PyTree, PyTree]:
  """Dispatches to the for-loop or the scan version of the recurrence."""
  if use_scan:
    return recurrent_op_scan(f, init, inputs, layer_range)
  return recurrent_op(f, init, inputs, layer_range)
