"""Tests for the Hamiltonian assembly of the reference models."""

import numpy as np
import pytest

from cgmres.core.model import HamiltonianModel
from cgmres.models.linear_quadratic import LinearQuadraticModel
from cgmres.models.pendulum import ConstrainedPendulum


def test_linear_quadratic_hamiltonian():
    model = LinearQuadraticModel(
        A=[[0.0, 1.0], [-1.0, 0.0]],
        B=[[0.0], [1.0]],
        Q=np.eye(2),
        R=[[0.5]],
        x_ref=[1.0, 0.0],
    )
    x = np.array([2.0, 3.0])
    u = np.array([4.0])
    lmd = np.array([0.5, -1.0])

    assert model.state_dim == 2
    assert model.control_dim == 1
    assert np.allclose(model.f(x, u, 0.0), [3.0, 2.0])
    assert np.allclose(model.H_x(x, u, lmd, 0.0), [1.0 + 1.0, 3.0 + 0.5])
    assert np.allclose(model.H_u(x, u, lmd, 0.0), [2.0 - 1.0])
    assert np.allclose(model.phi_x(x, 0.0), [1.0, 3.0])


def test_pendulum_hamiltonian_includes_constraint():
    model = ConstrainedPendulum(gravity=10.0, length=2.0, damping=0.5, u_max=1.0, r=2.0, r_dummy=0.3)
    x = np.array([0.0, 1.0])
    uc = np.array([0.6, 0.8, 0.25])
    lmd = np.array([1.0, 2.0])

    hu = model.H_u(x, uc, lmd, 0.0)

    assert hu.shape == (3,)
    assert hu[0] == pytest.approx(2.0 * 0.6 + 2.0 + 2.0 * 0.25 * 0.6)
    assert hu[1] == pytest.approx(-0.3 + 2.0 * 0.25 * 0.8)
    assert hu[2] == pytest.approx(0.0)


def test_pendulum_state_jacobian_matches_finite_difference():
    model = ConstrainedPendulum()
    x = np.array([0.7, -0.4])
    u = np.array([0.3, 1.0])
    eps = 1e-7

    numeric = np.column_stack([
        (model.f(x + eps * e, u, 0.0) - model.f(x, u, 0.0)) / eps for e in np.eye(2)
    ])

    assert np.allclose(model.f_x(x, u, 0.0), numeric, atol=1e-5)


def test_hamiltonian_model_is_abstract():
    with pytest.raises(TypeError):
        HamiltonianModel()
