"""Shared test fixtures: small CSV datasets and a minimal profile."""

from pathlib import Path

import pytest

from dataset_profiles import DatasetProfile, FieldSpec


SIMPLE_CSV = """\
name,lat,lng
A,12.97,77.59
B,13.0,77.6
"""


HOSPITAL_CSV = """\
Hospital Name,Address,Pincode,Contact Number,Fax,LATITUDE,LONGITUDE
City General,1 Main Road,560001,080-1111,080-1112,12.9716,77.5946
No Latitude Clinic,2 Side Street,560002,080-2222,,,77.6000
Riverside Hospital,,560003,,,12.9352,77.6245
Bad Number Hospital,3 Hill Road,560004,080-3333,,north,77.6100
Hilltop Hospital,4 Ridge Road,,080-4444,,13.0358,77.5970
"""


@pytest.fixture()
def simple_profile(tmp_path: Path) -> DatasetProfile:
    return DatasetProfile(
        name="simple",
        title="Nearest Place",
        latitude=("lat", "LATITUDE"),
        longitude=("lng", "LONGITUDE"),
        fields=(FieldSpec("name", ("name",)),),
        default_source=str(tmp_path / "simple.csv"),
    )


@pytest.fixture()
def simple_csv(tmp_path: Path) -> Path:
    path = tmp_path / "simple.csv"
    path.write_text(SIMPLE_CSV, encoding="utf-8")
    return path


@pytest.fixture()
def hospital_csv(tmp_path: Path) -> Path:
    path = tmp_path / "hospitals.csv"
    path.write_text(HOSPITAL_CSV, encoding="utf-8")
    return path
