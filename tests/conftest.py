import pytest

from translation_sync.content_store import ContentRepository
from translation_sync.job_ledger import JobLedger
from translation_sync.models import ContentItem, LocalePairing


SAMPLE_XLIFF = """<?xml version="1.0" encoding="UTF-8"?>
<xliff version="1.2" xmlns="urn:oasis:names:tc:xliff:document:1.2">
  <file source-language="en-US" target-language="de-DE" datatype="plaintext" original="42">
    <body>
      <trans-unit id="1" resname="title">
        <source>Hello world</source>
        <target>Hallo Welt</target>
      </trans-unit>
      <trans-unit id="2" resname="body">
        <source>A <g id="b1">bold</g> statement</source>
        <target>Eine <g id="b1">mutige</g> Aussage</target>
      </trans-unit>
      <trans-unit id="3" resname="taxonomy" wp_taxonomy="category" wp_id="7">
        <source>News</source>
        <target>Nachrichten</target>
      </trans-unit>
      <trans-unit id="4" resname="taxonomy" wp_taxonomy="category" wp_id="9">
        <source>Sports</source>
        <target>Sport</target>
      </trans-unit>
      <trans-unit id="5" resname="meta" wp_meta="_seo_title">
        <source>Read this</source>
        <target>Lies das</target>
      </trans-unit>
    </body>
  </file>
</xliff>
"""


@pytest.fixture
def sample_xliff():
    return SAMPLE_XLIFF


@pytest.fixture
def pairing():
    return LocalePairing(source="en-US", targets=("de-DE", "fr-FR", "es-ES"))


@pytest.fixture
def repository():
    """
    Parent 'p' (en, revision 5) with an out-of-date French child 'c-fr'
    (produced from revision 3), an up-to-date German child 'c-de', and a
    solitary item 'solo'.
    """
    repo = ContentRepository([
        ContentItem(id="p", locale="en", revision_marker=5, project_options_id="opt-1"),
        ContentItem(id="c-fr", locale="fr", revision_marker=3, project_options_id="opt-1"),
        ContentItem(id="c-de", locale="de", revision_marker=7, project_options_id="opt-1", source_revision=5),
        ContentItem(id="solo", locale="en", revision_marker=1),
    ])
    repo.link_translations("p", {"fr": "c-fr", "de": "c-de"})
    return repo


@pytest.fixture
def ledger():
    return JobLedger()
