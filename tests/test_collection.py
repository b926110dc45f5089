import tempfile
import unittest
from pathlib import Path

from blog_posts.services.collection import DuplicateSlugError, PostCollection, find_post_files
from blog_posts.utils.file_formats import FrontMatterError
from tests.support import JQUERY_POST, write_post, write_sample_blog


class TestPostCollection(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.folder = Path(self.tmp.name)
        write_sample_blog(self.folder)

    def tearDown(self):
        self.tmp.cleanup()

    def test_find_post_files_skips_other_files(self):
        write_post(self.folder, "README.txt", "not a post")
        names = [path.name for path in find_post_files(self.folder)]
        self.assertEqual(len(names), 3)
        self.assertNotIn("README.txt", names)

    def test_missing_directory(self):
        with self.assertRaises(FileNotFoundError):
            PostCollection.from_directory(self.folder / "missing")

    def test_loads_all_posts(self):
        collection = PostCollection.from_directory(self.folder)
        self.assertEqual(len(collection), 3)
        self.assertIn("using-queryover", collection)
        self.assertNotIn("missing", collection)

    def test_ordered_by_publication_not_filename(self):
        # An old date in a file that sorts last by name
        write_post(self.folder, "2014-01-01-imported.md", "---\ntitle: Imported\ndate: 2010-01-01\n---\nOld.")
        collection = PostCollection.from_directory(self.folder)
        slugs = [post.slug for post in collection.ordered()]
        self.assertEqual(
            slugs,
            ["looking-back-at-2012", "jquery-placeholder", "using-queryover", "imported"],
        )
        self.assertEqual([p.slug for p in collection.ordered(newest_first=False)], list(reversed(slugs)))

    def test_undated_posts_sort_last(self):
        write_post(self.folder, "drafts/untitled.md", "---\ntitle: Untitled draft\n---\nSoon.")
        ordered = PostCollection.from_directory(self.folder).ordered()
        self.assertEqual(ordered[-1].slug, "untitled-draft")

    def test_get(self):
        collection = PostCollection.from_directory(self.folder)
        self.assertEqual(collection.get("jquery-placeholder").title, "A tiny jQuery plugin for placeholders")
        self.assertIsNone(collection.get("nope"))

    def test_strict_loading_raises(self):
        write_post(self.folder, "2014-02-02-broken.md", "no front matter here")
        with self.assertRaises(FrontMatterError):
            PostCollection.from_directory(self.folder)

    def test_lenient_loading_records_errors(self):
        broken = write_post(self.folder, "2014-02-02-broken.md", "no front matter here")
        collection = PostCollection.from_directory(self.folder, strict=False)
        self.assertEqual(len(collection), 3)
        self.assertIn(broken, collection.load_errors)

    def test_lenient_loading_skips_unparseable_dates(self):
        bad = write_post(self.folder, "2014-02-02-someday.md", "---\nlayout: post\ntitle: Someday\ndate: sometime\n---\nBody")
        collection = PostCollection.from_directory(self.folder, strict=False)
        self.assertIn(bad, collection.load_errors)
        self.assertEqual(len(collection.ordered()), 3)

    def test_strict_loading_raises_on_unparseable_dates(self):
        write_post(self.folder, "2014-02-02-someday.md", "---\nlayout: post\ntitle: Someday\ndate: sometime\n---\nBody")
        with self.assertRaises(ValueError):
            PostCollection.from_directory(self.folder)

    def test_posts_without_slug_are_not_duplicates(self):
        write_post(self.folder, "drafts/untitled.md", "---\nlayout: post\n---\nOne.")
        write_post(self.folder, "drafts/scratch.md", "---\nlayout: post\n---\nTwo.")
        collection = PostCollection.from_directory(self.folder)
        self.assertEqual(len(collection), 5)
        self.assertEqual(collection.duplicate_slugs(), {})
        collection.ensure_unique()

    def test_duplicate_slugs(self):
        write_post(self.folder, "2015-05-05-jquery-placeholder.markdown", JQUERY_POST)
        collection = PostCollection.from_directory(self.folder)
        duplicates = collection.duplicate_slugs()
        self.assertEqual(list(duplicates), ["jquery-placeholder"])
        self.assertEqual(len(duplicates["jquery-placeholder"]), 2)
        with self.assertRaises(DuplicateSlugError):
            collection.ensure_unique()

    def test_unique_collection(self):
        PostCollection.from_directory(self.folder).ensure_unique()

    def test_grouping(self):
        collection = PostCollection.from_directory(self.folder)
        categories = collection.by_category()
        self.assertEqual(list(categories), ["jQuery", "NHibernate", "QueryOver", "Retrospective"])
        self.assertEqual([p.slug for p in categories["NHibernate"]], ["using-queryover"])
        self.assertEqual(list(collection.by_tag()), ["javascript"])

    def test_index(self):
        index = PostCollection.from_directory(self.folder).index("/:year/:title/")
        self.assertEqual(index[0]["slug"], "looking-back-at-2012")
        self.assertEqual(index[0]["url"], "/2013/looking-back-at-2012/")
        self.assertEqual(index[-1]["categories"], ["NHibernate", "QueryOver"])


if __name__ == "__main__":
    unittest.main()
