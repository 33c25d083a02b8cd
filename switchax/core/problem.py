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

"""Optimal control problem specification for switched systems."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterable

import jax.numpy as jnp
from jax import Array

from switchax.core.dual import MultiplierCollection
from switchax.core.metrics import LagrangianMetrics, Metrics
from switchax.core.types import StateFn, StateInputFn

if TYPE_CHECKING:
    from switchax.penalties.augmented_lagrangian import (
        StateAugmentedLagrangian,
        StateInputAugmentedLagrangian,
    )


def _stack(values: Iterable[Array]) -> Array:
    """Concatenates constraint vectors; empty collections give shape (0,)."""
    values = [jnp.atleast_1d(jnp.asarray(v)) for v in values]
    if not values:
        return jnp.zeros(0)
    return jnp.concatenate(values)


def _multiplier(multipliers: Dict[str, Array], name: str) -> Array:
    if name not in multipliers:
        raise ValueError(
            f"Missing multiplier for Lagrangian term '{name}'. "
            f"Available: {list(multipliers.keys())}"
        )
    return multipliers[name]


@dataclass
class OptimalControlProblem:
    """Named cost and constraint terms of a switched optimal control problem.

    The problem is

        min  Σ_events φ_j(t_j, x_j-) + ∫ L(t, x, u) dt + Φ(t_f, x_f)

    where every term is a sum over the named entries of the corresponding
    collection. Hard equality constraints are only measured (their squared
    residuals enter the performance index); soft constraints are augmented
    Lagrangian terms that carry their own multipliers.

    Intermediate collections are evaluated at every rollout sample,
    pre-jump collections just before every event and final collections at
    the terminal sample.

    Attributes:
        cost: State-input costs (t, x, u) -> scalar.
        state_cost: State-only intermediate costs (t, x) -> scalar.
        pre_jump_cost: Costs at the pre-jump state (t, x) -> scalar.
        final_cost: Terminal costs (t, x) -> scalar.
        equality_constraint: State-input equalities (t, x, u) -> vector.
        state_equality_constraint: State-only intermediate equalities.
        pre_jump_equality_constraint: Pre-jump equalities (t, x) -> vector.
        final_equality_constraint: Terminal equalities (t, x) -> vector.
        equality_lagrangian: State-input equality soft constraints.
        inequality_lagrangian: State-input inequality soft constraints.
        state_equality_lagrangian: State-only equality soft constraints.
        state_inequality_lagrangian: State-only inequality soft constraints.
        pre_jump_equality_lagrangian: Pre-jump equality soft constraints.
        pre_jump_inequality_lagrangian: Pre-jump inequality soft constraints.
        final_equality_lagrangian: Terminal equality soft constraints.
        final_inequality_lagrangian: Terminal inequality soft constraints.

    Example:
        >>> problem = OptimalControlProblem(
        ...     cost={'effort': lambda t, x, u: u @ u},
        ...     final_cost={'goal': lambda t, x: 10.0 * x @ x},
        ...     inequality_lagrangian={
        ...         'torque_limit': StateInputAugmentedLagrangian(
        ...             lambda t, x, u: 1.0 - u * u,
        ...             ModifiedRelaxedBarrierPenalty()),
        ...     },
        ... )
    """

    # Costs
    cost: Dict[str, StateInputFn] = field(default_factory=dict)
    state_cost: Dict[str, StateFn] = field(default_factory=dict)
    pre_jump_cost: Dict[str, StateFn] = field(default_factory=dict)
    final_cost: Dict[str, StateFn] = field(default_factory=dict)

    # Hard equality constraints
    equality_constraint: Dict[str, StateInputFn] = field(default_factory=dict)
    state_equality_constraint: Dict[str, StateFn] = field(default_factory=dict)
    pre_jump_equality_constraint: Dict[str, StateFn] = field(default_factory=dict)
    final_equality_constraint: Dict[str, StateFn] = field(default_factory=dict)

    # Soft constraints
    equality_lagrangian: Dict[str, StateInputAugmentedLagrangian] = field(default_factory=dict)
    inequality_lagrangian: Dict[str, StateInputAugmentedLagrangian] = field(default_factory=dict)
    state_equality_lagrangian: Dict[str, StateAugmentedLagrangian] = field(default_factory=dict)
    state_inequality_lagrangian: Dict[str, StateAugmentedLagrangian] = field(default_factory=dict)
    pre_jump_equality_lagrangian: Dict[str, StateAugmentedLagrangian] = field(default_factory=dict)
    pre_jump_inequality_lagrangian: Dict[str, StateAugmentedLagrangian] = field(default_factory=dict)
    final_equality_lagrangian: Dict[str, StateAugmentedLagrangian] = field(default_factory=dict)
    final_inequality_lagrangian: Dict[str, StateAugmentedLagrangian] = field(default_factory=dict)

    @property
    def has_soft_constraints(self) -> bool:
        """Return True if the problem has any augmented Lagrangian term."""
        return any((
            self.equality_lagrangian,
            self.inequality_lagrangian,
            self.state_equality_lagrangian,
            self.state_inequality_lagrangian,
            self.pre_jump_equality_lagrangian,
            self.pre_jump_inequality_lagrangian,
            self.final_equality_lagrangian,
            self.final_inequality_lagrangian,
        ))

    # Metrics

    def intermediate_metrics(
        self,
        t: float,
        x: Array,
        u: Array,
        multipliers: MultiplierCollection,
    ) -> Metrics:
        """Evaluates all intermediate terms at (t, x, u).

        Args:
            t: Sample time.
            x: State (n,).
            u: Input (m,).
            multipliers: Intermediate multipliers of this sample.

        Returns:
            Metrics of the sample.

        Raises:
            ValueError: If a Lagrangian term has no multiplier.
        """
        cost = sum(float(c(t, x, u)) for c in self.cost.values())
        cost += sum(float(c(t, x)) for c in self.state_cost.values())

        return Metrics(
            cost=cost,
            state_eq_constraint=_stack(
                c(t, x) for c in self.state_equality_constraint.values()),
            state_input_eq_constraint=_stack(
                c(t, x, u) for c in self.equality_constraint.values()),
            state_eq_lagrangian=self._state_lagrangians(
                self.state_equality_lagrangian, t, x, multipliers.state_eq),
            state_ineq_lagrangian=self._state_lagrangians(
                self.state_inequality_lagrangian, t, x, multipliers.state_ineq),
            state_input_eq_lagrangian=self._state_input_lagrangians(
                self.equality_lagrangian, t, x, u, multipliers.state_input_eq),
            state_input_ineq_lagrangian=self._state_input_lagrangians(
                self.inequality_lagrangian, t, x, u, multipliers.state_input_ineq),
        )

    def pre_jump_metrics(
        self,
        t: float,
        x: Array,
        multipliers: MultiplierCollection,
    ) -> Metrics:
        """Evaluates all pre-jump terms at the pre-jump state (t, x)."""
        return self._state_only_metrics(
            t, x, multipliers,
            self.pre_jump_cost,
            self.pre_jump_equality_constraint,
            self.pre_jump_equality_lagrangian,
            self.pre_jump_inequality_lagrangian,
        )

    def final_metrics(
        self,
        t: float,
        x: Array,
        multipliers: MultiplierCollection,
    ) -> Metrics:
        """Evaluates all final terms at the terminal state (t, x)."""
        return self._state_only_metrics(
            t, x, multipliers,
            self.final_cost,
            self.final_equality_constraint,
            self.final_equality_lagrangian,
            self.final_inequality_lagrangian,
        )

    # Multipliers

    def initialize_intermediate_multipliers(
        self, t: float, x: Array, u: Array) -> MultiplierCollection:
        return MultiplierCollection(
            state_eq={name: term.initialize_lagrangian(t, x) for name, term
                      in self.state_equality_lagrangian.items()},
            state_ineq={name: term.initialize_lagrangian(t, x) for name, term
                        in self.state_inequality_lagrangian.items()},
            state_input_eq={name: term.initialize_lagrangian(t, x, u) for name, term
                            in self.equality_lagrangian.items()},
            state_input_ineq={name: term.initialize_lagrangian(t, x, u) for name, term
                              in self.inequality_lagrangian.items()},
        )

    def initialize_pre_jump_multipliers(self, t: float, x: Array) -> MultiplierCollection:
        return MultiplierCollection(
            state_eq={name: term.initialize_lagrangian(t, x) for name, term
                      in self.pre_jump_equality_lagrangian.items()},
            state_ineq={name: term.initialize_lagrangian(t, x) for name, term
                        in self.pre_jump_inequality_lagrangian.items()},
        )

    def initialize_final_multipliers(self, t: float, x: Array) -> MultiplierCollection:
        return MultiplierCollection(
            state_eq={name: term.initialize_lagrangian(t, x) for name, term
                      in self.final_equality_lagrangian.items()},
            state_ineq={name: term.initialize_lagrangian(t, x) for name, term
                        in self.final_inequality_lagrangian.items()},
        )

    def update_intermediate_multipliers(
        self,
        t: float,
        x: Array,
        u: Array,
        multipliers: MultiplierCollection,
    ) -> MultiplierCollection:
        """Returns the multipliers of the next iteration for one sample."""
        def update_state(terms, current):
            return {name: term.update_lagrangian(t, x, _multiplier(current, name))[1]
                    for name, term in terms.items()}

        def update_state_input(terms, current):
            return {name: term.update_lagrangian(t, x, u, _multiplier(current, name))[1]
                    for name, term in terms.items()}

        return MultiplierCollection(
            state_eq=update_state(self.state_equality_lagrangian,
                                  multipliers.state_eq),
            state_ineq=update_state(self.state_inequality_lagrangian,
                                    multipliers.state_ineq),
            state_input_eq=update_state_input(self.equality_lagrangian,
                                              multipliers.state_input_eq),
            state_input_ineq=update_state_input(self.inequality_lagrangian,
                                                multipliers.state_input_ineq),
        )

    def update_pre_jump_multipliers(
        self, t: float, x: Array, multipliers: MultiplierCollection) -> MultiplierCollection:
        return self._update_state_only(
            t, x, multipliers,
            self.pre_jump_equality_lagrangian,
            self.pre_jump_inequality_lagrangian,
        )

    def update_final_multipliers(
        self, t: float, x: Array, multipliers: MultiplierCollection) -> MultiplierCollection:
        return self._update_state_only(
            t, x, multipliers,
            self.final_equality_lagrangian,
            self.final_inequality_lagrangian,
        )

    # Helpers

    @staticmethod
    def _state_lagrangians(
        terms: Dict[str, StateAugmentedLagrangian],
        t: float,
        x: Array,
        multipliers: Dict[str, Array],
    ) -> Dict[str, LagrangianMetrics]:
        return {name: term.get_value(t, x, _multiplier(multipliers, name))
                for name, term in terms.items()}

    @staticmethod
    def _state_input_lagrangians(
        terms: Dict[str, StateInputAugmentedLagrangian],
        t: float,
        x: Array,
        u: Array,
        multipliers: Dict[str, Array],
    ) -> Dict[str, LagrangianMetrics]:
        return {name: term.get_value(t, x, u, _multiplier(multipliers, name))
                for name, term in terms.items()}

    def _state_only_metrics(
        self,
        t: float,
        x: Array,
        multipliers: MultiplierCollection,
        costs: Dict[str, StateFn],
        equalities: Dict[str, StateFn],
        eq_lagrangians: Dict[str, StateAugmentedLagrangian],
        ineq_lagrangians: Dict[str, StateAugmentedLagrangian],
    ) -> Metrics:
        return Metrics(
            cost=sum(float(c(t, x)) for c in costs.values()),
            state_eq_constraint=_stack(c(t, x) for c in equalities.values()),
            state_eq_lagrangian=self._state_lagrangians(
                eq_lagrangians, t, x, multipliers.state_eq),
            state_ineq_lagrangian=self._state_lagrangians(
                ineq_lagrangians, t, x, multipliers.state_ineq),
        )

    @staticmethod
    def _update_state_only(
        t: float,
        x: Array,
        multipliers: MultiplierCollection,
        eq_lagrangians: Dict[str, StateAugmentedLagrangian],
        ineq_lagrangians: Dict[str, StateAugmentedLagrangian],
    ) -> MultiplierCollection:
        def update(terms, current):
            return {name: term.update_lagrangian(t, x, _multiplier(current, name))[1]
                    for name, term in terms.items()}

        return MultiplierCollection(
            state_eq=update(eq_lagrangians, multipliers.state_eq),
            state_ineq=update(ineq_lagrangians, multipliers.state_ineq),
        )
