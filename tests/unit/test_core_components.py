import numpy as np
import pytest

from backpropnet.core import matrix
from backpropnet.core.activations import sigmoid, sigmoid_prime
from backpropnet.core.batching import batch_count, partition, shuffled_batches
from backpropnet.core.errors import InvalidArgumentError, ShapeMismatchError
from backpropnet.core.types import TrainConfig, TrainItem
from backpropnet.training.losses import REGISTRY as LOSS_REGISTRY


def test_dot_rejects_inner_dimension_mismatch():
    a = np.ones((1, 3))
    b = np.ones((2, 4))
    with pytest.raises(ShapeMismatchError):
        matrix.dot(a, b)
    assert matrix.dot(a, np.ones((3, 4))).shape == (1, 4)


@pytest.mark.parametrize("op", [matrix.add, matrix.sub, matrix.mult])
def test_elementwise_ops_do_not_broadcast(op):
    with pytest.raises(ShapeMismatchError):
        op(np.ones((1, 3)), np.ones((3,)))
    with pytest.raises(ShapeMismatchError):
        op(np.ones((1, 3)), np.ones((3, 1)))


def test_apply_scale_and_transpose():
    a = np.array([[1.0, -2.0, 4.0]])
    assert np.allclose(matrix.apply(a, matrix.scale(0.5)), [[0.5, -1.0, 2.0]])
    assert matrix.transpose(a).shape == (3, 1)


def test_argmax_prefers_first_maximum():
    assert matrix.argmax(np.array([[0.2, 0.9, 0.9, 0.1]])) == 1
    with pytest.raises(ShapeMismatchError):
        matrix.argmax(np.zeros((1, 0)))


def test_one_hot_bounds():
    row = matrix.one_hot(4, 2)
    assert row.shape == (1, 4)
    assert np.array_equal(row, [[0.0, 0.0, 1.0, 0.0]])
    with pytest.raises(ShapeMismatchError):
        matrix.one_hot(4, 4)
    with pytest.raises(ShapeMismatchError):
        matrix.one_hot(4, -1)


def test_as_row_accepts_vectors_only():
    assert matrix.as_row([1.0, 2.0]).shape == (1, 2)
    assert matrix.as_row(np.ones((1, 5))).shape == (1, 5)
    with pytest.raises(ShapeMismatchError):
        matrix.as_row(np.ones((2, 2)))


def test_rand_init_is_seeded_and_not_zero():
    a = matrix.rand_init(3, 4, np.random.default_rng(0))
    b = matrix.rand_init(3, 4, np.random.default_rng(0))
    assert np.array_equal(a, b)
    assert np.count_nonzero(a) == a.size
    assert not np.any(matrix.zeros(2, 3))


def test_sigmoid_and_derivative():
    x = np.array([[-2.0, 0.0, 2.0]])
    s = sigmoid(x)
    assert np.allclose(s[0, 1], 0.5)
    assert np.allclose(s[0, 0] + s[0, 2], 1.0)
    assert np.allclose(sigmoid_prime(x), s * (1 - s))
    assert np.isclose(sigmoid_prime(np.zeros((1, 1)))[0, 0], 0.25)


@pytest.mark.parametrize(
    "n,size,expected",
    [
        (10, 3, [3, 3, 4]),
        (11, 3, [3, 3, 3, 2]),
        (9, 2, [2, 2, 2, 2, 1]),
        (7, 2, [2, 2, 2, 1]),
        (3, 2, [2, 1]),
        (5, 4, [5]),
        (4, 4, [4]),
        (1, 3, [1]),
        (6, 1, [1, 1, 1, 1, 1, 1]),
    ],
)
def test_partition_sizes(n, size, expected):
    batches = partition(list(range(n)), size)
    assert [len(b) for b in batches] == expected
    assert [x for batch in batches for x in batch] == list(range(n))


def test_batch_count_rounds_half_up():
    assert batch_count(10, 3) == 3
    assert batch_count(10, 4) == 3
    assert batch_count(14, 4) == 4
    assert batch_count(0, 3) == 0
    with pytest.raises(InvalidArgumentError):
        batch_count(10, 0)


def test_shuffled_batches_cover_every_item_once():
    items = list(range(10))
    batches = shuffled_batches(items, 3, np.random.default_rng(4))
    flat = [x for batch in batches for x in batch]
    assert sorted(flat) == items
    assert [len(b) for b in batches] == [3, 3, 4]
    again = shuffled_batches(items, 3, np.random.default_rng(4))
    assert again == batches


def test_shuffle_is_rederived_each_call():
    rng = np.random.default_rng(0)
    items = list(range(50))
    first = shuffled_batches(items, 50, rng)[0]
    second = shuffled_batches(items, 50, rng)[0]
    assert first != second


def test_train_item_coercion():
    item = TrainItem.create([1.0, 2.0, 3.0], 1.0, 3)
    assert item.values.shape == (1, 3)
    assert item.label == 1
    assert isinstance(item.label, int)
    assert item.size == 3
    with pytest.raises(InvalidArgumentError):
        TrainItem.create([1.0], 0.5, 2)
    with pytest.raises(ShapeMismatchError):
        TrainItem(values=np.ones((2, 2)), label=0, distinct=2)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"epochs": 0, "mini_batch_size": 1, "eta": 1.0},
        {"epochs": 1, "mini_batch_size": 0, "eta": 1.0},
        {"epochs": 1, "mini_batch_size": 1, "eta": 0.0},
        {"epochs": 1, "mini_batch_size": 1, "eta": float("nan")},
        {"epochs": 1.9, "mini_batch_size": 1, "eta": 1.0},
        {"epochs": 1, "mini_batch_size": 2.7, "eta": 1.0},
        {"epochs": True, "mini_batch_size": 1, "eta": 1.0},
    ],
)
def test_train_config_validation(kwargs):
    with pytest.raises(InvalidArgumentError):
        TrainConfig(**kwargs).validate()


def test_quadratic_loss_registry():
    loss = LOSS_REGISTRY.get("quadratic")
    value, delta = loss(np.array([[0.5, 0.5]]), np.array([[1.0, 0.0]]))
    assert np.isclose(value, 0.25)
    assert np.allclose(delta, [[-0.5, 0.5]])
    assert list(LOSS_REGISTRY.names()) == ["quadratic"]
    with pytest.raises(KeyError):
        LOSS_REGISTRY.get("hinge")
