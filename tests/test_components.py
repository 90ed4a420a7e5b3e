import numpy as np
import pandas as pd
import pytest

from py_farmind.components.activity import EXIT_ACTIVITY, Activity, ActivityCatalogue
from py_farmind.components.matrix import FarmProductMatrix
from py_farmind.components.person import Parameters, Person
from py_farmind.components.social_network import SocialNetwork
from py_farmind.config import merge_settings
from py_farmind.utility.errors import InconsistentMemoryError, UnknownFarmError


class TestActivity:
    def test_catalogue_lookup(self, catalogue):
        assert catalogue["maize"] == Activity(2, "maize")
        assert catalogue[2] == Activity(2, "maize")
        assert catalogue[Activity(2, "maize")].name == "maize"
        assert "rice" not in catalogue

    def test_exit_is_always_known(self, catalogue):
        assert EXIT_ACTIVITY in catalogue
        assert EXIT_ACTIVITY.name not in catalogue.names
        assert len(catalogue) == 5

    def test_duplicates_rejected(self):
        with pytest.raises(ValueError):
            ActivityCatalogue([(1, "wheat"), (2, "wheat")])

    def test_resolve_keeps_order_and_drops_duplicates(self, catalogue):
        acts = catalogue.resolve(["dairy", "wheat", "dairy"])
        assert [a.name for a in acts] == ["dairy", "wheat"]

    def test_matches(self):
        wheat = Activity(1, "wheat")
        assert wheat.matches("wheat")
        assert wheat.matches(1)
        assert not wheat.matches(Activity(2, "wheat"))


class TestPerson:
    def test_grow_older(self):
        p = Person(age=40, education=1, memory=3, entrepreneurship=0.2)
        assert p.grow_older() == 41
        assert p.to_dict()["age"] == 41

    def test_memory_below_two(self):
        with pytest.raises(InconsistentMemoryError):
            Person(age=40, education=1, memory=1, entrepreneurship=0.2)

    def test_parameters_round_trip(self, pars):
        parameters = Parameters.from_dict(pars)
        assert parameters.lambda_ == 2.25
        assert parameters.to_dict() == pars

    def test_parameters_reject_zero_a(self, pars):
        pars["a"] = 0
        with pytest.raises(ValueError):
            Parameters.from_dict(pars)


class TestMatrix:
    def test_get_set_increment(self, experience):
        experience.set("f2", "dairy", 3)
        assert experience.increment("f2", "dairy") == 4
        assert experience.get("f2", "dairy") == 4

    def test_row_is_a_copy(self, preferences):
        row = preferences.row("f1")
        row[0] = 99
        assert preferences.get("f1", "wheat") == 1

    def test_unknown_farm(self, preferences):
        with pytest.raises(UnknownFarmError):
            preferences.get("f9", "wheat")
        with pytest.raises(KeyError):
            preferences.get("f1", "rice")

    def test_row_length_checked(self):
        with pytest.raises(ValueError):
            FarmProductMatrix(["wheat", "maize"], {"f1": [1, 2, 3]})

    def test_frame_round_trip(self, preferences):
        df = preferences.to_frame()
        assert list(df.columns) == preferences.product_names
        again = FarmProductMatrix.from_frame(df)
        assert np.array_equal(again.row("f3"), preferences.row("f3"))


class TestSocialNetwork:
    def test_self_edge_dropped(self):
        net = SocialNetwork("f1", {"f1": 1.0, "f2": 0.5})
        assert "f1" not in net
        assert net.weight("f2") == 0.5
        assert net.weight("f9") == 0.0

    def test_invalid_weights(self):
        with pytest.raises(ValueError):
            SocialNetwork("f1", {"f2": -0.1})
        with pytest.raises(ValueError):
            SocialNetwork("f1", {"f2": float("nan")})

    def test_neighbors_skip_zero_weights(self):
        net = SocialNetwork("f1", {"f3": 0.2, "f2": 0.0, "f4": 0.1})
        assert net.neighbors() == ["f3", "f4"]
        assert net.strongest() == "f3"

    def test_strongest_tie_break(self):
        net = SocialNetwork("f1", {"f3": 0.5, "f2": 0.5})
        assert net.strongest() == "f2"
        assert SocialNetwork("f1", {}).strongest() is None

    def test_weighted_average(self):
        net = SocialNetwork("f1", {"f2": 3.0, "f3": 1.0})
        avg = net.weighted_average({"f2": [4, 0], "f3": [0, 4]})
        assert np.allclose(avg, [3, 1])
        assert net.weighted_average({}) is None

    def test_weights_are_read_only(self):
        net = SocialNetwork("f1", {"f2": 0.5})
        with pytest.raises(TypeError):
            net.weights["f2"] = 1.0

    def test_from_frame(self):
        df = pd.DataFrame(
            [[0.0, 0.4], [0.6, 0.0]], index=["f1", "f2"], columns=["f1", "f2"]
        )
        networks = SocialNetwork.from_frame(df)
        assert networks["f1"].to_dict() == {"f2": 0.4}
        assert networks["f2"].neighbors() == ["f1"]


class TestSettings:
    def test_merge_is_recursive(self):
        merged = merge_settings({"decision_making": {"selection": {"k": 5}}})
        assert merged["decision_making"]["selection"] == {"method": "top_k", "k": 5}
        assert merged["simulation"]["on_error"] == "fallback"

    def test_merge_does_not_modify_defaults(self):
        merge_settings({"simulation": {"on_error": "raise"}})
        assert merge_settings()["simulation"]["on_error"] == "fallback"
