# Copyright 2024 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Explicit one-step integrators for closed-loop continuous-time dynamics.

Each integrator is a factory taking a closed-loop vector field f(t, x) (the
flow map with the controller already substituted) and returning a step
function step(t, x, dt) -> x(t + dt). Step functions only use jax.numpy and
can be traced by lax.scan.
"""

from typing import Callable

ClosedLoopFn = Callable  # (t, x) -> dx/dt
StepFn = Callable  # (t, x, dt) -> x_next


def euler(field: ClosedLoopFn) -> StepFn:
    """Forward Euler step.

        x[k+1] = x[k] + dt * f(t, x[k])

    First-order accurate; may require a small time step.

    Example:
        >>> step = euler(lambda t, x: -x)
        >>> x_next = step(0.0, x, 0.01)
    """
    def step(t, x, dt):
        return x + dt * field(t, x)

    return step


def midpoint(field: ClosedLoopFn) -> StepFn:
    """Explicit midpoint step (2nd-order Runge-Kutta).

        k1 = f(t, x)
        k2 = f(t + dt/2, x + dt/2 * k1)
        x[k+1] = x[k] + dt * k2
    """
    def step(t, x, dt):
        k1 = field(t, x)
        k2 = field(t + 0.5 * dt, x + 0.5 * dt * k1)
        return x + dt * k2

    return step


def heun(field: ClosedLoopFn) -> StepFn:
    """Heun's method (explicit trapezoidal rule), second-order accurate.

        k1 = f(t, x)
        k2 = f(t + dt, x + dt * k1)
        x[k+1] = x[k] + dt/2 * (k1 + k2)
    """
    def step(t, x, dt):
        k1 = field(t, x)
        k2 = field(t + dt, x + dt * k1)
        return x + 0.5 * dt * (k1 + k2)

    return step


def rk4(field: ClosedLoopFn) -> StepFn:
    """Classic 4th-order Runge-Kutta step.

        k1 = f(t, x)
        k2 = f(t + dt/2, x + dt/2 * k1)
        k3 = f(t + dt/2, x + dt/2 * k2)
        k4 = f(t + dt, x + dt * k3)
        x[k+1] = x[k] + dt/6 * (k1 + 2*k2 + 2*k3 + k4)

    The standard choice for most applications.
    """
    def step(t, x, dt):
        k1 = field(t, x)
        k2 = field(t + 0.5 * dt, x + 0.5 * dt * k1)
        k3 = field(t + 0.5 * dt, x + 0.5 * dt * k2)
        k4 = field(t + dt, x + dt * k3)
        return x + dt / 6.0 * (k1 + 2.0 * k2 + 2.0 * k3 + k4)

    return step


_INTEGRATORS = {
    'euler': euler,
    'midpoint': midpoint,
    'heun': heun,
    'rk4': rk4,
}


def get_integrator(name: str) -> Callable[[ClosedLoopFn], StepFn]:
    """Returns the integrator factory registered under ``name``.

    Raises:
        ValueError: If the integrator name is not recognized.
    """
    name_lower = name.lower()
    if name_lower not in _INTEGRATORS:
        raise ValueError(
            f"Unknown integrator: {name}. Available: {list(_INTEGRATORS.keys())}"
        )
    return _INTEGRATORS[name_lower]
