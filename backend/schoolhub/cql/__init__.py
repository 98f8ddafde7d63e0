from schoolhub.cql.client import CqlClient
from schoolhub.cql.result import OK, CqlResult, ResultCode
from schoolhub.cql.table import Column, CqlTable, RelationTable, TableSpec
