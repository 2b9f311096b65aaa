import os, json, pdb
import unittest as test

from zenodeposit import metadata as md

class TestNormalizeAuthor(test.TestCase):

    def test_with_comma(self):
        for name in ["Doe, Jane", "Doe,Jane", "Plante, Raymond L.", "Institute, The"]:
            self.assertEqual(md.normalize_author(name), name)

    def test_first_last(self):
        self.assertEqual(md.normalize_author("Jane Doe"), "Doe, Jane")
        self.assertEqual(md.normalize_author("Oda Nobunaga"), "Nobunaga, Oda")

    def test_middle_names(self):
        self.assertEqual(md.normalize_author("Jane Q. Doe"), "Doe, Jane Q.")

    def test_single_token(self):
        self.assertEqual(md.normalize_author("GeoEcoMar"), "GeoEcoMar")
        self.assertEqual(md.normalize_author(""), "")

    def test_extra_whitespace(self):
        self.assertEqual(md.normalize_author("Jane Doe "), "Doe, Jane")
        self.assertEqual(md.normalize_author(" Doe"), "Doe")
        self.assertEqual(md.normalize_author("  Jane   Q.  Doe"), "Doe, Jane Q.")
        self.assertEqual(md.normalize_author(" Doe,  Jane "), "Doe, Jane")
        self.assertEqual(md.normalize_author("   "), "")

class TestSplitResourceType(test.TestCase):

    def test_split(self):
        self.assertEqual(md.split_resource_type("publication/book"), ("publication", "book"))
        self.assertEqual(md.split_resource_type("image / photo"), ("image", "photo"))
        self.assertEqual(md.split_resource_type("image/plot/bar"), ("image", "plot/bar"))

    def test_no_slash(self):
        self.assertEqual(md.split_resource_type("dataset"), ("dataset", None))

    def test_empty_subtype(self):
        self.assertEqual(md.split_resource_type("publication/"), ("publication", None))

class TestExtractDOINumber(test.TestCase):

    def test_extract(self):
        self.assertEqual(md.extract_doi_number("10.5281/zenodo.123456"), "123456")
        self.assertEqual(md.extract_doi_number("10.5281/zenodo.1234567"), "1234567")

    def test_no_number(self):
        self.assertIsNone(md.extract_doi_number("10.5281/zenodo.12345"))
        self.assertIsNone(md.extract_doi_number("10.5281/zenodo.123456x"))
        self.assertIsNone(md.extract_doi_number(None))
        self.assertIsNone(md.extract_doi_number(""))

class TestRecordDraft(test.TestCase):

    def setUp(self):
        self.draft = md.RecordDraft()

    def test_ctor(self):
        for name in md.RecordDraft.FIELDS:
            self.assertIsNone(getattr(self.draft, name), name)
        self.assertIsNone(self.draft.deposition_id)
        self.assertIsNone(self.draft.doi)
        self.assertIsNone(self.draft.doi_number)
        self.assertIsNone(self.draft.resource_subtype)

        self.draft = md.RecordDraft(title="Cores", author="Jane Doe", resource_type="Dataset")
        self.assertEqual(self.draft.title, "Cores")
        self.assertEqual(self.draft.author, "Doe, Jane")
        self.assertEqual(self.draft.resource_type, "dataset")

        with self.assertRaises(TypeError):
            md.RecordDraft(goober="gurn")

    def test_author(self):
        self.draft.author = "Jane Doe"
        self.assertEqual(self.draft.author, "Doe, Jane")
        self.draft.author = "Doe, Jane"
        self.assertEqual(self.draft.author, "Doe, Jane")
        self.draft.author = None
        self.assertIsNone(self.draft.author)

    def test_resource_type(self):
        self.draft.resource_type = "Image/Plot"
        self.assertEqual(self.draft.resource_type, "image/plot")
        self.assertIsNone(self.draft.resource_subtype)

        self.draft.split_resource_type()
        self.assertEqual(self.draft.resource_type, "image")
        self.assertEqual(self.draft.resource_subtype, "plot")

        # splitting again changes nothing
        self.draft.split_resource_type()
        self.assertEqual(self.draft.resource_type, "image")
        self.assertEqual(self.draft.resource_subtype, "plot")

        # setting a new type clears the subtype
        self.draft.resource_type = "Dataset"
        self.assertEqual(self.draft.resource_type, "dataset")
        self.assertIsNone(self.draft.resource_subtype)

    def test_split_drops_unrecognized_subtype(self):
        self.draft.resource_type = "software/library"
        self.draft.split_resource_type()
        self.assertEqual(self.draft.resource_type, "software")
        self.assertIsNone(self.draft.resource_subtype)

    def test_tags(self):
        self.draft.tags = ["tag1", "tag2", "tag1", "tag3"]
        self.assertEqual(self.draft.tags, ["tag1", "tag2", "tag3"])
        self.draft.tags = "solo"
        self.assertEqual(self.draft.tags, ["solo"])

    def test_contributors_copied(self):
        contribs = [{"name": "doe, jon", "type": "Editor"}]
        self.draft.contributors = contribs
        contribs[0]['name'] = "gurn"
        self.assertEqual(self.draft.contributors, [{"name": "doe, jon", "type": "Editor"}])

    def test_doi_number(self):
        self.draft.doi = "10.5281/zenodo.123456"
        self.assertEqual(self.draft.doi_number, "123456")
        self.draft.doi = "10.5281/zenodo.abc"
        self.assertIsNone(self.draft.doi_number)
        with self.assertRaises(AttributeError):
            self.draft.doi_number = "999999"

class TestMetadataBuilder(test.TestCase):

    def setUp(self):
        self.draft = md.RecordDraft()
        self.bldr = md.MetadataBuilder(self.draft)

    def test_build_empty(self):
        data = self.bldr.build()
        self.assertEqual(data, {
            "description": "No description.",
            "creators": [{"name": "", "affiliation": ""}]
        })

    def test_build_full(self):
        self.draft.update({
            "title": "Sediment cores of the Danube delta",
            "description": "Organic carbon content by depth",
            "author": "Jane Doe",
            "organization": "GeoEcoMar",
            "contributors": [{"name": "doe, jon", "type": "Editor"},
                             {"name": "oda, fsa", "type": "Supervisor"}],
            "tags": ["tag1", "tag2", "tag3"],
            "resource_type": "Dataset",
            "dateinterval": "2023-01-01/2023-12-31",
            "visibility": "open",
            "communities": [{"identifier": "geoecomar"}],
            "license": "cc-by-4.0"
        })
        data = self.bldr.build()
        self.assertEqual(data['title'], "Sediment cores of the Danube delta")
        self.assertEqual(data['description'], "Organic carbon content by depth")
        self.assertEqual(data['creators'], [{"name": "Doe, Jane", "affiliation": "GeoEcoMar"}])
        self.assertEqual(len(data['contributors']), 2)
        self.assertEqual(data['contributors'][1]['type'], "Supervisor")
        self.assertEqual(data['keywords'], ["tag1", "tag2", "tag3"])
        self.assertEqual(data['upload_type'], "dataset")
        self.assertEqual(data['publication_date'], "2023-01-01/2023-12-31")
        self.assertEqual(data['access_right'], "open")
        self.assertEqual(data['communities'], [{"identifier": "geoecomar"}])
        self.assertEqual(data['license'], "cc-by-4.0")
        self.assertNotIn('publication_type', data)
        self.assertNotIn('image_type', data)
        for key in "author tags resource_type dateinterval visibility".split():
            self.assertNotIn(key, data)

    def test_absent_fields_omitted(self):
        self.draft.title = "Cores"
        self.draft.license = "cc-by-4.0"
        data = self.bldr.build()
        self.assertEqual(set(data.keys()), set("title license description creators".split()))
        self.assertNotIn(None, data.values())

    def test_publication_subtype(self):
        self.draft.resource_type = "Publication/Book"
        data = self.bldr.build()
        self.assertEqual(data['upload_type'], "publication")
        self.assertEqual(data['publication_type'], "book")
        self.assertNotIn('image_type', data)

        # the subtype survives a rebuild
        data = self.bldr.build()
        self.assertEqual(data['upload_type'], "publication")
        self.assertEqual(data['publication_type'], "book")
        self.assertEqual(self.draft.resource_type, "publication")

    def test_image_subtype(self):
        self.draft.resource_type = "image/photo"
        data = self.bldr.build()
        self.assertEqual(data['upload_type'], "image")
        self.assertEqual(data['image_type'], "photo")
        self.assertNotIn('publication_type', data)

    def test_other_subtype_dropped(self):
        self.draft.resource_type = "dataset/tabular"
        data = self.bldr.build()
        self.assertEqual(data['upload_type'], "dataset")
        self.assertNotIn('publication_type', data)
        self.assertNotIn('image_type', data)

    def test_build_is_fresh(self):
        self.draft.tags = ["tag1"]
        self.draft.license = "cc-by-4.0"
        data = self.bldr.build()
        self.assertIn('license', data)

        data['keywords'].append("gurn")
        self.assertEqual(self.draft.tags, ["tag1"])

        self.draft.license = None
        self.draft.resource_type = "image/plot"
        data = self.bldr.build()
        self.assertNotIn('license', data)
        self.assertEqual(data['image_type'], "plot")

        self.draft.resource_type = "publication/article"
        data = self.bldr.build()
        self.assertNotIn('image_type', data)
        self.assertEqual(data['publication_type'], "article")

    def test_metadata_is_json(self):
        self.draft.update({"title": "Cores", "author": "Jane Doe", "tags": ["a"],
                           "resource_type": "publication/book"})
        data = json.loads(json.dumps(self.bldr.build()))
        self.assertEqual(data['creators'][0]['name'], "Doe, Jane")

class TestValidateDraft(test.TestCase):

    def test_valid(self):
        draft = md.RecordDraft(visibility="open", dateinterval="2023-01-01/2023-12-31",
                               contributors=[{"name": "doe, jon", "type": "Editor"}],
                               communities=[{"identifier": "geoecomar"}])
        self.assertEqual(md.validate_draft(draft), [])
        self.assertEqual(md.validate_draft(md.RecordDraft()), [])

        draft.dateinterval = "2023/2024-06"
        self.assertEqual(md.validate_draft(draft), [])
        draft.dateinterval = "2023-02-14"
        self.assertEqual(md.validate_draft(draft), [])

    def test_invalid(self):
        draft = md.RecordDraft(visibility="public", dateinterval="Jan 2023",
                               contributors=[{"type": "Editor"}],
                               communities=[{"id": "geoecomar"}])
        errs = md.validate_draft(draft)
        self.assertEqual(len(errs), 4)
        self.assertTrue(errs[0].startswith("visibility"))
        self.assertTrue(errs[1].startswith("dateinterval"))
        self.assertIn("contributors[0]", errs[2])
        self.assertIn("communities[0]", errs[3])

        draft = md.RecordDraft(dateinterval="2023/2024/2025")
        self.assertEqual(len(md.validate_draft(draft)), 1)


if __name__ == '__main__':
    test.main()
