from pytest import fixture

from pyoimap.configurations import Configurations
from pyoimap.maps import InsertionHashMap, InsertionHashMultimap, InsertionMap, InsertionMultimap


@fixture(params=[InsertionMap, InsertionHashMap], ids=["sorted", "hashed"])
def unique_class(request):
    return request.param


@fixture(params=[InsertionMultimap, InsertionHashMultimap], ids=["sorted", "hashed"])
def multi_class(request):
    return request.param


@fixture()
def small_configurations():
    return Configurations(initial_bucket_count=2, max_load_factor=1.0)
