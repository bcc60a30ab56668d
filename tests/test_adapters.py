"""Tests for the source adapters, driven by fake fetchers and browsers."""
import json
from unittest.mock import MagicMock, Mock

import pytest
import requests

from errors import FetchError
from schema import Species
from scrapers import best_friends, la_city, la_county, pasadena_humane, spcala
from scrapers.generic_shelter import SiteConfig, ShelterSiteAdapter, create_generic_adapter
from scrapers.http_client import PageFetcher


def _by_slug(results):
  return {r.shelter_slug: r for r in results}


def _mock_session(response=None, error=None):
  session = MagicMock()
  session.headers = {}
  if error is not None:
    session.get.side_effect = error
  else:
    session.get.return_value = response
  return session


def _mock_response(payload=None, content=b"<html></html>"):
  response = Mock()
  response.status_code = 200
  response.content = content
  response.json.return_value = payload
  response.raise_for_status = Mock()
  return response


class TestPageFetcher:
  """Transport failures surface as FetchError"""

  def test_fetch_json_and_timeout(self) -> None:
    session = _mock_session(_mock_response({"animals": []}))
    with PageFetcher(timeout=5, session=session) as fetcher:
      assert fetcher.fetch_json("https://example.org/api") == {"animals": []}

    assert session.get.call_args.args == ("https://example.org/api",)
    assert session.get.call_args.kwargs["timeout"] == 5
    assert "User-Agent" in session.headers
    session.close.assert_called_once()

  def test_http_error_status(self) -> None:
    response = _mock_response()
    response.raise_for_status.side_effect = requests.HTTPError("404 Client Error: Not Found")
    fetcher = PageFetcher(session=_mock_session(response))

    with pytest.raises(FetchError) as exc:
      fetcher.fetch_html("https://example.org/missing")
    assert exc.value.url == "https://example.org/missing"
    assert "404" in str(exc.value)

  def test_connection_error(self) -> None:
    fetcher = PageFetcher(session=_mock_session(error=requests.ConnectionError("refused")))
    with pytest.raises(FetchError):
      fetcher.fetch_text("https://example.org/")

  def test_invalid_json(self) -> None:
    response = _mock_response()
    response.json.side_effect = ValueError("Expecting value")
    fetcher = PageFetcher(session=_mock_session(response))

    with pytest.raises(FetchError) as exc:
      fetcher.fetch_json("https://example.org/api")
    assert "invalid JSON" in str(exc.value)

  def test_fetch_html_parses(self) -> None:
    response = _mock_response(content=b'<div class="pet-card"><h3>Rex</h3></div>')
    soup = PageFetcher(session=_mock_session(response)).fetch_html("https://example.org/")
    assert soup.select_one(".pet-card h3").get_text() == "Rex"


class TestLACity:

  def test_cards_attributed_by_location_text(self, fake_fetcher) -> None:
    page = """
      <div class="pet-listing" data-pet-id="A1"><h3>Rocky</h3><span class="location">East Valley Animal Shelter</span></div>
      <div class="pet-listing" data-pet-id="A2"><h3>Bella</h3><span class="location">Harbor Shelter, San Pedro</span></div>
      <div class="pet-listing" data-pet-id="A3"><h3>Mystery</h3></div>
    """
    fetcher, factory = fake_fetcher({la_city.ADOPT_URL: page})
    results = _by_slug(la_city.create_adapter(factory).scrape())

    assert len(results) == 6
    assert all(r.success for r in results.values())
    assert [a.name for a in results["la-city-east-valley"].animals] == ["Rocky"]
    assert [a.name for a in results["la-city-harbor"].animals] == ["Bella"]
    assert [a.name for a in results["la-city-north-central"].animals] == ["Mystery"]
    assert results["la-city-west-la"].animals == []
    assert fetcher.closed

  def test_same_name_different_ids_both_kept(self, fake_fetcher) -> None:
    page = """
      <div class="pet-listing" data-pet-id="A1"><h3>Max</h3><span class="location">Harbor</span></div>
      <div class="pet-listing" data-pet-id="A2"><h3>Max</h3><span class="location">East Valley</span></div>
    """
    _, factory = fake_fetcher({la_city.ADOPT_URL: page})
    results = _by_slug(la_city.create_adapter(factory).scrape())

    assert [a.external_id for a in results["la-city-harbor"].animals] == ["A1"]
    assert [a.external_id for a in results["la-city-east-valley"].animals] == ["A2"]

  def test_location_filter(self, fake_fetcher) -> None:
    page = '<div class="pet-listing" data-pet-id="A1"><h3>Rocky</h3><span class="location">Harbor</span></div>'
    _, factory = fake_fetcher({la_city.ADOPT_URL: page})
    results = la_city.create_adapter(factory).scrape(location="la-city-harbor")
    assert [r.shelter_slug for r in results] == ["la-city-harbor"]
    assert len(results[0].animals) == 1


class TestPasadenaHumane:

  def test_iframe_fallback_when_page_has_no_cards(self, fake_fetcher) -> None:
    widget = "https://widget.example.org/adopt/list"
    fetcher, factory = fake_fetcher({
      pasadena_humane.ADOPT_URL: f'<main><iframe src="{widget}"></iframe></main>',
      widget: '<div class="pet" data-id="77"><h2>Luna</h2><span class="species">Cat</span></div>',
    })
    results = pasadena_humane.create_adapter(factory).scrape()

    assert len(results) == 1
    animals = results[0].animals
    assert [(a.external_id, a.name, a.species) for a in animals] == [("77", "Luna", Species.CAT)]
    assert widget in fetcher.requested

  def test_iframe_skipped_when_cards_found(self, fake_fetcher) -> None:
    fetcher, factory = fake_fetcher({
      pasadena_humane.ADOPT_URL: (
        '<div class="pet-card" data-pet-id="5"><h3>Ollie</h3></div>'
        '<iframe src="https://widget.example.org/adopt/list"></iframe>'
      ),
    })
    results = pasadena_humane.create_adapter(factory).scrape()
    assert [a.name for a in results[0].animals] == ["Ollie"]
    assert fetcher.requested == [pasadena_humane.ADOPT_URL]


SPCALA_PAGES = {
  spcala.DOGS_URL: """
    <article class="pet">
      <a href="/pet/123/"><img src="//cdn.spcala.com/max.jpg"><h3>Max</h3></a>
      <span class="location">South Bay Pet Adoption Center</span>
    </article>
  """,
  spcala.CATS_URL: """
    <article class="pet">
      <a href="/pet/456/"><h3>Whiskers</h3></a>
      <span class="location">Long Beach - Pitchford Center</span>
    </article>
  """,
}


class TestSpcaLA:

  def test_species_from_page_and_locations(self, fake_fetcher) -> None:
    _, factory = fake_fetcher(dict(SPCALA_PAGES))
    results = _by_slug(spcala.create_adapter(factory, fetch_details=False).scrape())

    max_ = results["spcala-south-bay"].animals[0]
    assert max_.external_id == "123"
    assert max_.species == Species.DOG
    assert max_.photos == ["https://cdn.spcala.com/max.jpg"]
    assert max_.adoption_url == "https://spcala.com/pet/123/"

    whiskers = results["spcala-long-beach"].animals[0]
    assert whiskers.species == Species.CAT
    assert whiskers.external_id == "456"

  def test_detail_page_enrichment(self, fake_fetcher) -> None:
    pages = dict(SPCALA_PAGES)
    pages["https://spcala.com/pet/123/"] = """
      <div class="pet-gallery"><img src="/media/max-1.jpg"><img src="/media/max-2.jpg"></div>
      <div class="pet-description">Max is a goofy, loving boy.</div>
      <ul class="pet-attributes"><li>Neutered</li><li>Good with kids</li><li>No cats</li></ul>
    """
    fetcher, factory = fake_fetcher(pages)
    results = _by_slug(spcala.create_adapter(factory, fetch_details=True).scrape())

    max_ = results["spcala-south-bay"].animals[0]
    assert max_.photos == ["https://spcala.com/media/max-1.jpg", "https://spcala.com/media/max-2.jpg"]
    assert max_.description == "Max is a goofy, loving boy."
    assert max_.spayed_neutered is True
    assert max_.good_with_children is True
    assert max_.good_with_cats is False
    assert max_.good_with_dogs is None

    # Whiskers' detail page is missing; the listing data is kept
    whiskers = results["spcala-long-beach"].animals[0]
    assert whiskers.description is None
    assert "https://spcala.com/pet/456/" in fetcher.requested

  def test_missing_listing_page_fails_every_location(self, fake_fetcher) -> None:
    _, factory = fake_fetcher({spcala.CATS_URL: SPCALA_PAGES[spcala.CATS_URL]})
    results = spcala.create_adapter(factory, fetch_details=False).scrape()

    assert len(results) == 2
    for result in results:
      assert result.success is False
      assert result.animals == []
      assert spcala.DOGS_URL in result.error

  def test_missing_listing_page_retires_nothing(self, fake_fetcher, dal, engine) -> None:
    _, factory = fake_fetcher(dict(SPCALA_PAGES))
    for result in spcala.create_adapter(factory, fetch_details=False).scrape():
      engine.record_result(result)

    _, factory = fake_fetcher({spcala.CATS_URL: SPCALA_PAGES[spcala.CATS_URL]})
    for result in spcala.create_adapter(factory, fetch_details=False).scrape():
      engine.record_result(result)

    assert dal.get_animal_by_external_id("spcala", "123").is_available is True
    assert dal.get_animal_by_external_id("spcala", "456").is_available is True


class TestBestFriends:

  NEXT_DATA = {
    "props": {"pageProps": {"pets": [
      {"id": 5001, "name": "Biscuit", "species": "Dog", "breed": "Beagle", "photo": "/img/biscuit.jpg"},
    ]}},
  }

  def test_page_state_fallback_when_apis_fail(self, fake_fetcher) -> None:
    page = f'<script id="__NEXT_DATA__" type="application/json">{json.dumps(self.NEXT_DATA)}</script>'
    fetcher, factory = fake_fetcher({best_friends.SEARCH_URL: page})
    results = best_friends.create_adapter(factory).scrape()

    result = results[0]
    assert result.shelter_slug == "best-friends-la"
    assert result.success
    assert result.error is None
    assert [(a.external_id, a.name) for a in result.animals] == [("5001", "Biscuit")]
    assert result.animals[0].photos == ["https://bestfriends.org/img/biscuit.jpg"]
    for url in best_friends.API_CANDIDATES:
      assert url in fetcher.requested

  def test_api_wins_and_ends_cascade(self, fake_fetcher) -> None:
    fetcher, factory = fake_fetcher(json_pages={
      best_friends.API_CANDIDATES[1]: {"animals": [{"id": "bf1", "name": "Mango", "type": "Cat"}]},
    })
    results = best_friends.create_adapter(factory).scrape()

    assert [a.name for a in results[0].animals] == ["Mango"]
    assert best_friends.SEARCH_URL not in fetcher.requested
    assert best_friends.API_CANDIDATES[2] not in fetcher.requested


class TestGenericSites:

  def test_unreachable_site_fails_without_raising(self, fake_fetcher) -> None:
    _, factory = fake_fetcher()
    results = create_generic_adapter("burbank", factory).scrape()

    assert len(results) == 1
    assert results[0].success is False
    assert "404" in results[0].error
    assert results[0].animals == []

  def test_embedded_script_array_merges_with_cards(self, fake_fetcher) -> None:
    url = "https://www.glendalehumanesociety.org/adopt/"
    page = """
      <div class="pet-card" data-pet-id="1"><h3>Rex</h3></div>
      <script>var pets = [{"id": 1, "name": "Rex"}, {"id": 2, "name": "Ace", "species": "Dog"}];</script>
    """
    _, factory = fake_fetcher({url: page})
    results = create_generic_adapter("glendale-humane", factory).scrape()
    assert sorted(a.external_id for a in results[0].animals) == ["1", "2"]

  def test_api_record_normalized_end_to_end(self, fake_fetcher) -> None:
    config = SiteConfig(
      source_key="burbank", name="Burbank", id_prefix="burbank",
      listing_urls=[("https://example.org/adopt", None)],
      api_urls=["https://example.org/api/pets"],
    )
    _, factory = fake_fetcher(json_pages={"https://example.org/api/pets": [{
      "externalId": "101", "name": "Rex", "species": "Dog", "age": "3 years",
      "size": "lg", "gender": "m", "photos": ["/img/rex.jpg"],
    }]})
    rex = ShelterSiteAdapter(config, factory).scrape()[0].animals[0]
    assert rex.external_id == "101"
    assert rex.photos == ["https://example.org/img/rex.jpg"]


def _county_record(animal_id, name, location="", **extra):
  record = {"animalId": animal_id, "animalName": name, "animalType": "DOG", "location": location, "imageCount": 1}
  record.update(extra)
  return record


class TestLACounty:
  """Browser interception, then rendered DOM, then a direct API request"""

  def test_paginates_until_no_new_animals(self, fake_fetcher, fake_browser) -> None:
    browser, browser_factory = fake_browser({
      1: [{"animals": [_county_record("A1", "Rocky", "Lancaster Animal Care Center"),
                       _county_record("A2", "Bella", "Carson/Gardena")]}],
      2: [[_county_record("A3", "Duke", "Baldwin Park", animalType="CAT")]],
      3: [[_county_record("A3", "Duke", "Baldwin Park")]],
      4: [[_county_record("A4", "Never", "Downey")]],
    })
    fetcher, factory = fake_fetcher()
    results = _by_slug(la_county.LACountyAdapter(factory, browser_factory, max_pages=10).scrape())

    assert len(browser.loaded) == 3
    assert browser.closed
    assert [a.name for a in results["la-county-lancaster"].animals] == ["Rocky"]
    assert [a.name for a in results["la-county-carson"].animals] == ["Bella"]
    duke = results["la-county-baldwin-park"].animals[0]
    assert duke.species == Species.CAT
    assert duke.photos == [f"{la_county.IMAGE_BASE}A3.jpg"]
    assert duke.adoption_url == f"{la_county.SEARCH_URL}?AnimalID=A3"
    assert results["la-county-downey"].animals == []
    assert fetcher.requested == []

  def test_page_limit(self, fake_browser, fake_fetcher) -> None:
    browser, browser_factory = fake_browser({
      n: [[_county_record(f"A{n}", f"Pet {n}")]] for n in range(1, 6)
    })
    _, factory = fake_fetcher()
    la_county.LACountyAdapter(factory, browser_factory, max_pages=2).scrape()
    assert len(browser.loaded) == 2

  def test_rendered_dom_fallback(self, fake_browser, fake_fetcher) -> None:
    html = """
      <div class="card custom-card">
        <img src="https://example.org/daisy.jpg">
        <button class="fav" data-id="A900" data-name="Daisy"></button>
      </div>
    """
    _, browser_factory = fake_browser(html=html)
    _, factory = fake_fetcher()
    results = _by_slug(la_county.LACountyAdapter(factory, browser_factory).scrape())

    daisy = results["la-county-downey"].animals[0]
    assert (daisy.external_id, daisy.name, daisy.breed) == ("A900", "Daisy", "Mixed Breed")

  def test_direct_api_when_browser_unavailable(self, fake_browser, fake_fetcher) -> None:
    _, browser_factory = fake_browser(fail_on_start=True)
    _, factory = fake_fetcher(json_pages={la_county.API_URL: [_county_record("B1", "Scout", "Castaic")]})
    results = _by_slug(la_county.LACountyAdapter(factory, browser_factory).scrape())

    assert all(r.success for r in results.values())
    assert [a.name for a in results["la-county-castaic"].animals] == ["Scout"]

  def test_every_strategy_failing(self, fake_browser, fake_fetcher) -> None:
    _, browser_factory = fake_browser(fail_on_start=True)
    _, factory = fake_fetcher()
    results = la_county.LACountyAdapter(factory, browser_factory).scrape()

    assert len(results) == 6
    for result in results:
      assert result.success is False
      assert result.animals == []
      assert "intercept" in result.error

  def test_location_filter(self, fake_browser, fake_fetcher) -> None:
    _, browser_factory = fake_browser({1: [[_county_record("A1", "Rocky", "Carson")]]})
    _, factory = fake_fetcher()
    results = la_county.LACountyAdapter(factory, browser_factory).scrape(location="la-county-carson")
    assert [r.shelter_slug for r in results] == ["la-county-carson"]
    assert [a.name for a in results[0].animals] == ["Rocky"]


@pytest.mark.parametrize("record,expected_name", [
  ({"animalId": 42}, "Pet 42"),
  ({"AnimalId": "X9", "Name": "Zed"}, "Zed"),
])
def test_county_record_name_fallback(record, expected_name) -> None:
  assert la_county.animal_from_record(record).name == expected_name


def test_county_record_without_id_is_skipped() -> None:
  assert la_county.animal_from_record({"animalName": "Ghost"}) is None


def test_fetch_error_message() -> None:
  assert str(FetchError("https://example.org", "timed out")) == "https://example.org: timed out"
