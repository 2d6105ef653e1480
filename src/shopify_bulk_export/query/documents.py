"""GraphQL documents sent to the Admin API to drive a bulk operation."""

START_BULK_QUERY = """mutation StartBulkQuery ($query: String!) {
  bulkOperationRunQuery(query: $query) {
    bulkOperation {
      id
      status
    }
    userErrors {
      field
      message
    }
  }
}"""

BULK_STATUS_QUERY = """query BulkStatus ($id: ID!) {
  bulk: node (id: $id) {
    __typename
    ... on BulkOperation {
      id
      status
      errorCode
      createdAt
      completedAt
      objectCount
      fileSize
      url
      partialDataUrl
    }
  }
}"""

BULK_OPERATION_TYPENAME = "BulkOperation"
