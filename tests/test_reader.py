import pytest

from py_farmind.utility.reader import (
    load_inputs,
    read_activity_results,
    read_income_results,
    read_parameters,
)

FILES = {
    "activities.csv": "id,name\n1,wheat\n2,maize\n3,dairy\n",
    "parameters.csv": (
        "index,alpha_plus,alpha_minus,lambda,phi_plus,phi_minus,a,b,k,name\n"
        "1,0.88,0.88,2.25,0.0,0.1,1,9,0.5,baseline\n"
        "2,0.5,0.5,1.5,0.1,0.2,1,4,1,alternative\n"
    ),
    "products_preference.csv": "farm,wheat,maize,dairy\nf1,3,1,0\nf2,0,2,5\n",
    "farming_years.csv": "farm,wheat,maize,dairy\nf1,10,0,0\nf2,,4,7\n",
    "social_networks.csv": "farm,f1,f2\nf1,0,0.8\nf2,0.3,0\n",
    "farm_data.csv": (
        "name,x,y,birth,education,memory,entrepreneurship,a1,a2,a3,i1,i2,i3\n"
        "f1,1.5,2.5,1970,2,3,0.4,wheat,,,100,90,80\n"
        "f2,3.0,4.0,1980,1,3,0.9,maize,dairy,rice,50,55,60\n"
    ),
}


@pytest.fixture
def data_dir(tmp_path):
    for name, text in FILES.items():
        (tmp_path / name).write_text(text)
    return tmp_path


def test_load_inputs(data_dir):
    inputs = load_inputs(data_dir, current_year=2020)
    assert inputs["parameters"].name == "baseline"
    assert inputs["catalogue"].names == ["wheat", "maize", "dairy"]

    f1 = inputs["farms_dict"]["f1"]
    assert f1["person"] == {
        "age": 50,
        "education": 2,
        "memory": 3,
        "entrepreneurship": 0.4,
    }
    assert f1["activities"] == ["wheat"]
    assert f1["incomes"] == [100.0, 90.0, 80.0]
    assert f1["coordinates"] == (1.5, 2.5)
    # Unknown names in the activity slots are skipped.
    assert inputs["farms_dict"]["f2"]["activities"] == ["maize", "dairy"]

    assert inputs["preferences"].get("f2", "dairy") == 5
    assert inputs["experience"].get("f2", "wheat") == 0
    assert inputs["networks"]["f1"].to_dict() == {"f2": 0.8}


def test_regions_file(data_dir):
    (data_dir / "regions.csv").write_text("farm,region\nf1,north\n")
    farms = load_inputs(data_dir, current_year=2020)["farms_dict"]
    assert farms["f1"]["region"] == "north"
    assert "region" not in farms["f2"]


def test_parameter_set(data_dir):
    pars = read_parameters(data_dir / "parameters.csv", parameter_set=2)
    assert pars.name == "alternative"
    assert pars.lambda_ == 1.5
    assert pars.b == 4
    with pytest.raises(ValueError):
        read_parameters(data_dir / "parameters.csv", parameter_set=3)


def test_solver_results(tmp_path):
    (tmp_path / "income.csv").write_text("farm,income\nf1,120.5\nf2,80\n")
    (tmp_path / "activity.csv").write_text("farm,activity\nf1,wheat\nf1,maize\nf2,dairy\n")
    assert read_income_results(tmp_path / "income.csv") == {"f1": 120.5, "f2": 80.0}
    assert read_activity_results(tmp_path / "activity.csv") == {
        "f1": ["wheat", "maize"],
        "f2": ["dairy"],
    }
