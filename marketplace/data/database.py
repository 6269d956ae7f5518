# marketplace/data/database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from marketplace.utils.settings import DATABASE_URL


def build_engine(url: str):
    #sqlite tylko dev/testy - wiele watkow, czekaj na lock zamiast od razu bledu
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": 30},
        )
    return create_engine(url, pool_pre_ping=True)


engine = build_engine(DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    # modele musza byc zaimportowane zanim create_all zobaczy tabele
    import marketplace.data.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
