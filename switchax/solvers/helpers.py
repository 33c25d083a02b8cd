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

"""Rollout evaluation helpers shared by augmented Lagrangian solvers.

These functions form the forward half of an iteration:

1. roll out the current controller (``switchax.rollout.rollout_trajectory``),
2. evaluate costs and constraints along the rollout
   (``compute_rollout_metrics``),
3. reduce them to a ``PerformanceIndex``,
4. update the multipliers (``update_dual_solution``) or search a step
   length along a proposed controller update (``line_search``).
"""

from dataclasses import dataclass, replace
from typing import Optional

from absl import logging
import jax.numpy as jnp
from jax import Array

from switchax.config import LineSearchSettings
from switchax.control.linear_controller import (
    LinearController,
    compute_controller_update_is,
    increment_controller,
)
from switchax.core.dual import DualSolution
from switchax.core.metrics import (
    Metrics,
    MetricsCollection,
    PerformanceIndex,
    sum_penalties,
)
from switchax.core.mode_schedule import ModeSchedule
from switchax.core.problem import OptimalControlProblem
from switchax.core.trajectory import PrimalSolution
from switchax.core.types import RolloutDivergenceError, ScalarArray, TimeWindow
from switchax.rollout.time_triggered import TimeTriggeredRollout, rollout_trajectory
from switchax.utils.quadrature import trapezoidal_integration


def compute_rollout_metrics(
    problem: OptimalControlProblem,
    primal_solution: PrimalSolution,
    dual_solution: DualSolution,
) -> MetricsCollection:
    """Evaluates cost and constraint terms along a rollout.

    Walks the trajectory once in increasing time. Every sample gets
    intermediate metrics; the sample just before each post-event index
    additionally gets pre-jump metrics; the last sample gets final metrics.

    Args:
        problem: Cost and constraint definition.
        primal_solution: Rolled-out trajectory.
        dual_solution: Multipliers aligned with ``primal_solution``.

    Returns:
        A fresh MetricsCollection.

    Raises:
        ValueError: If the primal or dual solution is malformed.
    """
    primal_solution.validate()
    dual_solution.validate_against(primal_solution)

    times = primal_solution.time_trajectory
    states = primal_solution.state_trajectory
    inputs = primal_solution.input_trajectory
    post_event_indices = primal_solution.post_event_indices

    metrics = MetricsCollection()
    next_event = 0
    for k, (t, x, u) in enumerate(zip(times, states, inputs)):
        metrics.intermediates.append(
            problem.intermediate_metrics(t, x, u, dual_solution.intermediates[k]))

        if next_event < len(post_event_indices) and k + 1 == post_event_indices[next_event]:
            metrics.pre_jumps.append(
                problem.pre_jump_metrics(t, x, dual_solution.pre_jumps[next_event]))
            next_event += 1

    if times:
        metrics.final = problem.final_metrics(times[-1], states[-1], dual_solution.final)

    return metrics


def _squared_norm(v: Array) -> float:
    return float(jnp.sum(jnp.square(v)))


def compute_rollout_performance_index(
    time_trajectory: ScalarArray,
    metrics: MetricsCollection,
) -> PerformanceIndex:
    """Reduces rollout metrics to a performance index.

    Each field is built the same way: the final term, plus the sum over all
    pre-jump terms, plus the trapezoidal integral of the intermediate terms.

    - total cost: costs.
    - equality SSE: squared norm of state equalities at final and pre-jump
      times, of state and state-input equalities at intermediate times.
    - equality/inequality Lagrangian penalties: summed penalties of the
      state terms at final and pre-jump times, of the state and state-input
      terms at intermediate times.

    The dynamics violation is zero since a rollout satisfies the dynamics.

    Raises:
        ValueError: If the number of intermediate metrics differs from the
            number of time samples.
    """
    if len(time_trajectory) != len(metrics.intermediates):
        raise ValueError(
            f"Got {len(time_trajectory)} time samples but "
            f"{len(metrics.intermediates)} intermediate metrics"
        )

    def reduce(final_fn, intermediate_fn) -> float:
        total = final_fn(metrics.final)
        total += sum(final_fn(m) for m in metrics.pre_jumps)
        total += trapezoidal_integration(
            time_trajectory, [intermediate_fn(m) for m in metrics.intermediates])
        return total

    def cost(m: Metrics) -> float:
        return m.cost

    def state_eq_sse(m: Metrics) -> float:
        return _squared_norm(m.state_eq_constraint)

    def eq_sse(m: Metrics) -> float:
        return (_squared_norm(m.state_eq_constraint)
                + _squared_norm(m.state_input_eq_constraint))

    def state_eq_penalty(m: Metrics) -> float:
        return sum_penalties(m.state_eq_lagrangian)

    def eq_penalty(m: Metrics) -> float:
        return (sum_penalties(m.state_eq_lagrangian)
                + sum_penalties(m.state_input_eq_lagrangian))

    def state_ineq_penalty(m: Metrics) -> float:
        return sum_penalties(m.state_ineq_lagrangian)

    def ineq_penalty(m: Metrics) -> float:
        return (sum_penalties(m.state_ineq_lagrangian)
                + sum_penalties(m.state_input_ineq_lagrangian))

    return PerformanceIndex(
        total_cost=reduce(cost, cost),
        dynamics_violation_sse=0.0,
        equality_constraints_sse=reduce(state_eq_sse, eq_sse),
        equality_lagrangians_penalty=reduce(state_eq_penalty, eq_penalty),
        inequality_lagrangians_penalty=reduce(state_ineq_penalty, ineq_penalty),
    )


def initialize_dual_solution(
    problem: OptimalControlProblem,
    primal_solution: PrimalSolution,
) -> DualSolution:
    """Creates initial multipliers for every sample, event and the final time."""
    primal_solution.validate()
    times = primal_solution.time_trajectory
    states = primal_solution.state_trajectory
    inputs = primal_solution.input_trajectory

    dual_solution = DualSolution(
        intermediates=[problem.initialize_intermediate_multipliers(t, x, u)
                       for t, x, u in zip(times, states, inputs)],
        pre_jumps=[problem.initialize_pre_jump_multipliers(times[k - 1], states[k - 1])
                   for k in primal_solution.post_event_indices],
    )
    if times:
        dual_solution.final = problem.initialize_final_multipliers(times[-1], states[-1])
    return dual_solution


def update_dual_solution(
    problem: OptimalControlProblem,
    primal_solution: PrimalSolution,
    dual_solution: DualSolution,
) -> DualSolution:
    """Applies the multiplier update of every soft constraint along a rollout.

    Returns:
        A new DualSolution; ``dual_solution`` is not modified.
    """
    primal_solution.validate()
    dual_solution.validate_against(primal_solution)
    times = primal_solution.time_trajectory
    states = primal_solution.state_trajectory
    inputs = primal_solution.input_trajectory

    updated = DualSolution(
        intermediates=[
            problem.update_intermediate_multipliers(t, x, u, multipliers)
            for t, x, u, multipliers
            in zip(times, states, inputs, dual_solution.intermediates)
        ],
        pre_jumps=[
            problem.update_pre_jump_multipliers(times[k - 1], states[k - 1], multipliers)
            for k, multipliers
            in zip(primal_solution.post_event_indices, dual_solution.pre_jumps)
        ],
    )
    if times:
        updated.final = problem.update_final_multipliers(
            times[-1], states[-1], dual_solution.final)
    return updated


@dataclass
class LineSearchResult:
    """Outcome of a line search.

    Attributes:
        step_length: Accepted step length; 0.0 if every trial was rejected.
        controller: Controller of the accepted trial (or the baseline).
        primal_solution: Rollout of the accepted trial.
        metrics: Metrics of the accepted trial.
        performance_index: Performance index of the accepted trial.
    """
    step_length: float
    controller: LinearController
    primal_solution: PrimalSolution
    metrics: MetricsCollection
    performance_index: PerformanceIndex


def line_search(
    problem: OptimalControlProblem,
    rollout: TimeTriggeredRollout,
    unoptimized_controller: LinearController,
    time_window: TimeWindow,
    init_state: Array,
    mode_schedule: ModeSchedule,
    dual_solution: DualSolution,
    baseline: Optional[LineSearchResult] = None,
    settings: Optional[LineSearchSettings] = None,
) -> LineSearchResult:
    """Backtracking line search along a proposed controller update.

    Step lengths max_step_length * contraction_rate^i are tried down to
    min_step_length. A trial is accepted when its merit satisfies

        merit < baseline_merit - armijo_coefficient * step_length * update_is

    where update_is is ``compute_controller_update_is`` of the proposal.
    Divergent trials are rejected.

    Args:
        problem: Cost and constraint definition.
        rollout: Rollout engine.
        unoptimized_controller: Baseline controller carrying delta_biases.
        time_window: Rollout window.
        init_state: Initial state.
        mode_schedule: Mode schedule of the rollout.
        dual_solution: Multipliers aligned with the rollouts.
        baseline: Result of the current iterate. If None, it is computed by
            rolling out the baseline controller (step length 0).
        settings: Line-search settings.

    Returns:
        LineSearchResult of the accepted trial, or ``baseline`` with step
        length 0 if none.
    """
    settings = settings or LineSearchSettings()

    def evaluate(step_length: float) -> LineSearchResult:
        controller = increment_controller(step_length, unoptimized_controller)
        primal_solution = PrimalSolution(controller=controller)
        rollout_trajectory(rollout, time_window, init_state, mode_schedule,
                           primal_solution)
        metrics = compute_rollout_metrics(problem, primal_solution, dual_solution)
        performance_index = compute_rollout_performance_index(
            primal_solution.time_trajectory, metrics)
        return LineSearchResult(step_length, controller, primal_solution,
                                metrics, performance_index)

    if baseline is None:
        baseline = evaluate(0.0)

    update_is = compute_controller_update_is(unoptimized_controller)
    baseline_merit = baseline.performance_index.merit

    step_length = settings.max_step_length
    while step_length >= settings.min_step_length:
        try:
            trial = evaluate(step_length)
        except RolloutDivergenceError as e:
            logging.info('Step length %s rejected: %s', step_length, e)
        else:
            threshold = (baseline_merit
                         - settings.armijo_coefficient * step_length * update_is)
            if trial.performance_index.merit < threshold:
                logging.info('Step length %s accepted, merit %s -> %s.',
                             step_length, baseline_merit,
                             trial.performance_index.merit)
                return trial
        step_length *= settings.contraction_rate

    logging.info('Line search found no acceptable step; keeping the baseline.')
    return replace(baseline, step_length=0.0)
