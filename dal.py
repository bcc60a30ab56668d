"""
Data Access Layer (DAL)
v2.0.0 - Shelter animal record store

Central API for all persisted data. The reconciliation engine and the
orchestrator only talk to storage through the RecordStore operations below.

Design Principles:
- Single point of access for all data
- Storage implementation is abstracted (RecordStore); SQLite ships here
- One animal row per (source_key, external_id), enforced by a unique
  constraint and written with a single atomic upsert
- Animals are never deleted, only marked unavailable
- Run logs are append-only

Usage:
  from dal import DAL

  dal = DAL("shelters.db")
  dal.init_database()
  animal_id = dal.save_animal("la-city", "la-city-harbor", scraped)
"""
import sqlite3
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Protocol, Tuple

from config import DB_PATH
from schema import (
  ATTRIBUTE_FLAGS, MUTABLE_FIELDS,
  ScrapedAnimal, StoredAnimal, AnimalPhoto,
  ShelterMetadata, ScrapeRunLog,
  get_current_timestamp,
)


# Columns the consumer-facing search may filter on by equality
FILTERABLE_FIELDS = [
  "source_key", "shelter_slug", "species", "breed", "age", "gender", "size",
] + ATTRIBUTE_FLAGS

SHELTER_FIELDS = [
  "name", "website", "adoption_url", "platform", "source_key", "email",
  "phone", "street", "city", "postcode", "latitude", "longitude",
]


class RecordStore(Protocol):
  """Storage operations the reconciliation pipeline depends on"""

  def upsert_shelter(self, shelter: ShelterMetadata) -> None: ...

  def get_shelter(self, slug: str) -> Optional[Dict]: ...

  def get_shelters_by_source(self, source_key: str) -> List[Dict]: ...

  def mark_shelter_scraped(self, slug: str, scraped_at: Optional[str] = None) -> None: ...

  def get_animal_ids_for_source(self, source_key: str,
                                shelter_slug: Optional[str] = None) -> Dict[str, Tuple[int, bool]]: ...

  def save_animal(self, source_key: str, shelter_slug: str, animal: ScrapedAnimal,
                  seen_at: Optional[str] = None) -> int: ...

  def set_availability(self, animal_id: int, is_available: bool) -> None: ...

  def insert_run_log(self, log: ScrapeRunLog) -> int: ...


class DAL:
  """
  SQLite record store.

  Responsibilities:
  - Shelter rows (upsert by slug)
  - Animal rows (upsert by source_key + external_id, soft retirement)
  - Photo collections (full replace per animal)
  - Scrape run logs (append only)
  - Search/count queries for consumers
  """

  def __init__(self, db_path: str = DB_PATH):
    self.db_path = db_path

  # ============================================
  # Database Connection Management
  # ============================================

  @contextmanager
  def _get_connection(self):
    """Get database connection with automatic cleanup"""
    conn = sqlite3.connect(self.db_path, timeout=30)
    conn.row_factory = sqlite3.Row
    try:
      yield conn
      conn.commit()
    except Exception:
      conn.rollback()
      raise
    finally:
      conn.close()

  def init_database(self):
    """Initialize database schema"""
    with self._get_connection() as conn:
      cursor = conn.cursor()

      cursor.execute("""
        CREATE TABLE IF NOT EXISTS shelters (
          id INTEGER PRIMARY KEY AUTOINCREMENT,
          slug TEXT NOT NULL UNIQUE,
          name TEXT NOT NULL,
          website TEXT,
          adoption_url TEXT,
          platform TEXT,
          source_key TEXT NOT NULL,
          email TEXT,
          phone TEXT,
          street TEXT,
          city TEXT,
          postcode TEXT,
          latitude REAL,
          longitude REAL,
          last_scraped_at TEXT,
          created_at TEXT NOT NULL,
          updated_at TEXT NOT NULL
        )
      """)

      cursor.execute("""
        CREATE TABLE IF NOT EXISTS animals (
          id INTEGER PRIMARY KEY AUTOINCREMENT,
          source_key TEXT NOT NULL,
          shelter_slug TEXT NOT NULL,
          external_id TEXT NOT NULL,
          name TEXT NOT NULL,
          species TEXT NOT NULL,
          breed TEXT,
          breed_secondary TEXT,
          age TEXT NOT NULL,
          gender TEXT NOT NULL,
          size TEXT NOT NULL,
          description TEXT,
          color TEXT,
          adoption_url TEXT,
          intake_date TEXT,
          location TEXT,
          spayed_neutered INTEGER,
          house_trained INTEGER,
          special_needs INTEGER,
          shots_current INTEGER,
          good_with_children INTEGER,
          good_with_dogs INTEGER,
          good_with_cats INTEGER,
          first_seen_at TEXT NOT NULL,
          last_seen_at TEXT NOT NULL,
          is_available INTEGER NOT NULL DEFAULT 1,
          UNIQUE (source_key, external_id)
        )
      """)

      cursor.execute("""
        CREATE TABLE IF NOT EXISTS animal_photos (
          id INTEGER PRIMARY KEY AUTOINCREMENT,
          animal_id INTEGER NOT NULL,
          url TEXT NOT NULL,
          is_primary INTEGER NOT NULL DEFAULT 0,
          sort_order INTEGER NOT NULL DEFAULT 0,
          FOREIGN KEY (animal_id) REFERENCES animals(id)
        )
      """)

      cursor.execute("""
        CREATE TABLE IF NOT EXISTS scrape_logs (
          id INTEGER PRIMARY KEY AUTOINCREMENT,
          source_key TEXT NOT NULL,
          shelter_slug TEXT NOT NULL,
          shelter_name TEXT,
          status TEXT NOT NULL,
          pets_found INTEGER DEFAULT 0,
          pets_added INTEGER DEFAULT 0,
          pets_updated INTEGER DEFAULT 0,
          pets_removed INTEGER DEFAULT 0,
          pets_failed INTEGER DEFAULT 0,
          error_message TEXT,
          duration_ms INTEGER DEFAULT 0,
          created_at TEXT NOT NULL
        )
      """)

      # Indexes
      cursor.execute("CREATE INDEX IF NOT EXISTS idx_animals_source ON animals(source_key, shelter_slug)")
      cursor.execute("CREATE INDEX IF NOT EXISTS idx_animals_available ON animals(is_available)")
      cursor.execute("CREATE INDEX IF NOT EXISTS idx_animals_species ON animals(species)")
      cursor.execute("CREATE INDEX IF NOT EXISTS idx_photos_animal ON animal_photos(animal_id)")
      cursor.execute("CREATE INDEX IF NOT EXISTS idx_logs_time ON scrape_logs(created_at)")

  # ============================================
  # Shelters
  # ============================================

  def upsert_shelter(self, shelter: ShelterMetadata):
    """Create the shelter row if absent, otherwise overwrite its metadata"""
    now = get_current_timestamp()
    values = [getattr(shelter, f) for f in SHELTER_FIELDS]
    columns = ", ".join(SHELTER_FIELDS)
    placeholders = ", ".join("?" * len(SHELTER_FIELDS))
    updates = ", ".join(f"{f} = excluded.{f}" for f in SHELTER_FIELDS)

    with self._get_connection() as conn:
      conn.execute(f"""
        INSERT INTO shelters (slug, {columns}, created_at, updated_at)
        VALUES (?, {placeholders}, ?, ?)
        ON CONFLICT(slug) DO UPDATE SET {updates}, updated_at = excluded.updated_at
      """, [shelter.slug] + values + [now, now])

  def get_shelter(self, slug: str) -> Optional[Dict]:
    with self._get_connection() as conn:
      row = conn.execute("SELECT * FROM shelters WHERE slug = ?", (slug,)).fetchone()
      return dict(row) if row else None

  def get_shelters_by_source(self, source_key: str) -> List[Dict]:
    with self._get_connection() as conn:
      rows = conn.execute(
        "SELECT * FROM shelters WHERE source_key = ? ORDER BY slug", (source_key,)
      ).fetchall()
      return [dict(row) for row in rows]

  def get_all_shelters(self) -> List[Dict]:
    with self._get_connection() as conn:
      rows = conn.execute("SELECT * FROM shelters ORDER BY name").fetchall()
      return [dict(row) for row in rows]

  def mark_shelter_scraped(self, slug: str, scraped_at: Optional[str] = None):
    with self._get_connection() as conn:
      conn.execute(
        "UPDATE shelters SET last_scraped_at = ? WHERE slug = ?",
        (scraped_at or get_current_timestamp(), slug)
      )

  # ============================================
  # Animals
  # ============================================

  def get_animal_ids_for_source(self, source_key: str,
                                shelter_slug: Optional[str] = None) -> Dict[str, Tuple[int, bool]]:
    """Stored projection: external_id -> (id, is_available)"""
    query = "SELECT id, external_id, is_available FROM animals WHERE source_key = ?"
    params: List[Any] = [source_key]
    if shelter_slug:
      query += " AND shelter_slug = ?"
      params.append(shelter_slug)

    with self._get_connection() as conn:
      rows = conn.execute(query, params).fetchall()
      return {row["external_id"]: (row["id"], bool(row["is_available"])) for row in rows}

  def save_animal(self, source_key: str, shelter_slug: str, animal: ScrapedAnimal,
                  seen_at: Optional[str] = None) -> int:
    """
    Upsert one animal and replace its photos in a single transaction.
    If any statement fails the row and its photos are left as they were.
    """
    with self._get_connection() as conn:
      animal_id = self._upsert_animal(conn, source_key, shelter_slug, animal, seen_at)
      self._replace_photos(conn, animal_id, animal.photos)
      return animal_id

  def upsert_animal(self, source_key: str, shelter_slug: str, animal: ScrapedAnimal,
                    seen_at: Optional[str] = None) -> int:
    with self._get_connection() as conn:
      return self._upsert_animal(conn, source_key, shelter_slug, animal, seen_at)

  def replace_photos(self, animal_id: int, urls: List[str]):
    with self._get_connection() as conn:
      self._replace_photos(conn, animal_id, urls)

  def _upsert_animal(self, conn: sqlite3.Connection, source_key: str, shelter_slug: str,
                     animal: ScrapedAnimal, seen_at: Optional[str] = None) -> int:
    """
    Insert or overwrite one animal in a single statement.

    New rows get first_seen_at; existing rows keep it. Either way the
    animal ends up available with last_seen_at = seen_at. Returns the row id.
    """
    now = seen_at or get_current_timestamp()
    values = animal.field_values()
    columns = ", ".join(MUTABLE_FIELDS)
    placeholders = ", ".join("?" * len(MUTABLE_FIELDS))
    updates = ", ".join(f"{f} = excluded.{f}" for f in MUTABLE_FIELDS)

    conn.execute(f"""
      INSERT INTO animals (source_key, shelter_slug, external_id, {columns},
                           first_seen_at, last_seen_at, is_available)
      VALUES (?, ?, ?, {placeholders}, ?, ?, 1)
      ON CONFLICT(source_key, external_id) DO UPDATE SET
        shelter_slug = excluded.shelter_slug,
        {updates},
        last_seen_at = excluded.last_seen_at,
        is_available = 1
    """, [source_key, shelter_slug, animal.external_id]
         + [values[f] for f in MUTABLE_FIELDS] + [now, now])

    row = conn.execute(
      "SELECT id FROM animals WHERE source_key = ? AND external_id = ?",
      (source_key, animal.external_id)
    ).fetchone()
    return row["id"]

  def _replace_photos(self, conn: sqlite3.Connection, animal_id: int, urls: List[str]):
    """Delete every stored photo for the animal, then insert urls in order"""
    conn.execute("DELETE FROM animal_photos WHERE animal_id = ?", (animal_id,))
    conn.executemany(
      "INSERT INTO animal_photos (animal_id, url, is_primary, sort_order) VALUES (?, ?, ?, ?)",
      [(animal_id, url, 1 if i == 0 else 0, i) for i, url in enumerate(urls)]
    )

  def set_availability(self, animal_id: int, is_available: bool):
    with self._get_connection() as conn:
      conn.execute(
        "UPDATE animals SET is_available = ? WHERE id = ?",
        (1 if is_available else 0, animal_id)
      )

  def get_photos(self, animal_id: int) -> List[AnimalPhoto]:
    with self._get_connection() as conn:
      rows = conn.execute(
        "SELECT url, is_primary, sort_order FROM animal_photos WHERE animal_id = ? ORDER BY sort_order",
        (animal_id,)
      ).fetchall()
      return [AnimalPhoto(row["url"], bool(row["is_primary"]), row["sort_order"]) for row in rows]

  def get_animal(self, animal_id: int) -> Optional[StoredAnimal]:
    with self._get_connection() as conn:
      row = conn.execute("SELECT * FROM animals WHERE id = ?", (animal_id,)).fetchone()
    if not row:
      return None
    return StoredAnimal.from_row(dict(row), self.get_photos(animal_id))

  def get_animal_by_external_id(self, source_key: str, external_id: str) -> Optional[StoredAnimal]:
    with self._get_connection() as conn:
      row = conn.execute(
        "SELECT * FROM animals WHERE source_key = ? AND external_id = ?",
        (source_key, external_id)
      ).fetchone()
    if not row:
      return None
    return StoredAnimal.from_row(dict(row), self.get_photos(row["id"]))

  def count_all_animals(self) -> int:
    """Every row ever stored, available or not"""
    with self._get_connection() as conn:
      return conn.execute("SELECT COUNT(*) FROM animals").fetchone()[0]

  # ============================================
  # Consumer queries
  # ============================================

  def _where(self, filters: Optional[Dict[str, Any]], search: Optional[str],
             available_only: bool) -> Tuple[str, List[Any]]:
    clauses = []
    params: List[Any] = []
    if available_only:
      clauses.append("is_available = 1")
    for field, value in (filters or {}).items():
      if field not in FILTERABLE_FIELDS:
        raise ValueError(f"Cannot filter on {field}")
      if value is None or value == "":
        continue
      clauses.append(f"{field} = ?")
      params.append(value)
    if search:
      clauses.append("(name LIKE ? OR breed LIKE ? OR description LIKE ?)")
      pattern = f"%{search}%"
      params.extend([pattern, pattern, pattern])
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    return where, params

  def search_animals(self, filters: Optional[Dict[str, Any]] = None, search: Optional[str] = None,
                     available_only: bool = True, limit: int = 50, offset: int = 0) -> List[StoredAnimal]:
    """Filter by field equality and name/breed/description substring, newest first"""
    where, params = self._where(filters, search, available_only)
    with self._get_connection() as conn:
      rows = conn.execute(
        f"SELECT * FROM animals {where} ORDER BY last_seen_at DESC, id DESC LIMIT ? OFFSET ?",
        params + [limit, offset]
      ).fetchall()
      rows = [dict(row) for row in rows]
    return [StoredAnimal.from_row(row, self.get_photos(row["id"])) for row in rows]

  def count_animals(self, filters: Optional[Dict[str, Any]] = None, search: Optional[str] = None,
                    available_only: bool = True) -> int:
    where, params = self._where(filters, search, available_only)
    with self._get_connection() as conn:
      return conn.execute(f"SELECT COUNT(*) FROM animals {where}", params).fetchone()[0]

  def list_breeds(self, species: Optional[str] = None) -> List[str]:
    """Distinct breeds of available animals"""
    query = "SELECT DISTINCT breed FROM animals WHERE is_available = 1 AND breed IS NOT NULL AND breed != ''"
    params: List[Any] = []
    if species:
      query += " AND species = ?"
      params.append(species)
    query += " ORDER BY breed"
    with self._get_connection() as conn:
      return [row["breed"] for row in conn.execute(query, params).fetchall()]

  def get_shelter_summaries(self) -> List[Dict]:
    """Every shelter with its count of available animals"""
    with self._get_connection() as conn:
      rows = conn.execute("""
        SELECT s.slug, s.name, s.city, s.source_key, s.last_scraped_at,
               COUNT(a.id) AS active_pets
        FROM shelters s
        LEFT JOIN animals a ON a.shelter_slug = s.slug AND a.is_available = 1
        GROUP BY s.id
        ORDER BY s.name
      """).fetchall()
      return [dict(row) for row in rows]

  # ============================================
  # Scrape run logs
  # ============================================

  def insert_run_log(self, log: ScrapeRunLog) -> int:
    """Append one run log row. Rows are never updated."""
    created_at = log.created_at or get_current_timestamp()
    with self._get_connection() as conn:
      cursor = conn.execute("""
        INSERT INTO scrape_logs (
          source_key, shelter_slug, shelter_name, status, pets_found, pets_added,
          pets_updated, pets_removed, pets_failed, error_message, duration_ms, created_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
      """, (
        log.source_key, log.shelter_slug, log.shelter_name, log.status, log.pets_found,
        log.pets_added, log.pets_updated, log.pets_removed, log.pets_failed,
        log.error_message, log.duration_ms, created_at,
      ))
      return cursor.lastrowid

  def get_run_logs(self, limit: int = 20, source_key: Optional[str] = None) -> List[ScrapeRunLog]:
    """Most recent run logs first"""
    query = "SELECT * FROM scrape_logs"
    params: List[Any] = []
    if source_key:
      query += " WHERE source_key = ?"
      params.append(source_key)
    query += " ORDER BY id DESC LIMIT ?"
    params.append(limit)
    with self._get_connection() as conn:
      return [ScrapeRunLog.from_dict(dict(row)) for row in conn.execute(query, params).fetchall()]

  def get_last_successful_scrape(self) -> Optional[str]:
    with self._get_connection() as conn:
      row = conn.execute(
        "SELECT created_at FROM scrape_logs WHERE status = 'success' ORDER BY id DESC LIMIT 1"
      ).fetchone()
      return row["created_at"] if row else None


# Create a default instance for easy importing
_default_dal: Optional[DAL] = None

def get_dal() -> DAL:
  """Get the default DAL instance"""
  global _default_dal
  if _default_dal is None:
    _default_dal = DAL()
    _default_dal.init_database()
  return _default_dal
