import unittest

from shopify_bulk_export.transform.relations import attach_children, group_by_parent

RECORDS = [
    {"id": "gid://shopify/Product/1", "title": "Shirt"},
    {"id": "gid://shopify/ProductVariant/11", "__parentId": "gid://shopify/Product/1"},
    {"id": "gid://shopify/Product/2", "title": "Hat"},
    {"id": "gid://shopify/ProductVariant/12", "__parentId": "gid://shopify/Product/1"},
    {"id": "gid://shopify/InventoryLevel/5", "__parentId": "gid://shopify/ProductVariant/12"},
]


class TestRelations(unittest.TestCase):
    def test_group_by_parent_preserves_order(self):
        groups = group_by_parent(RECORDS)
        self.assertEqual([r["id"] for r in groups[None]], ["gid://shopify/Product/1", "gid://shopify/Product/2"])
        self.assertEqual(
            [r["id"] for r in groups["gid://shopify/Product/1"]],
            ["gid://shopify/ProductVariant/11", "gid://shopify/ProductVariant/12"],
        )

    def test_attach_children_nests_recursively(self):
        roots = attach_children(RECORDS)
        self.assertEqual(len(roots), 2)
        shirt = roots[0]
        self.assertEqual([c["id"] for c in shirt["children"]], ["gid://shopify/ProductVariant/11", "gid://shopify/ProductVariant/12"])
        self.assertEqual(shirt["children"][1]["children"][0]["id"], "gid://shopify/InventoryLevel/5")
        self.assertEqual(roots[1]["children"], [])
        # Input records are left untouched
        self.assertNotIn("children", RECORDS[0])

    def test_orphans_are_dropped(self):
        roots = attach_children([{"id": "a"}, {"id": "b", "__parentId": "missing"}], key="items")
        self.assertEqual(roots, [{"id": "a", "items": []}])


if __name__ == "__main__":
    unittest.main()
