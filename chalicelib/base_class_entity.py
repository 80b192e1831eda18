from typing import Tuple, Dict, List, Any, Callable

from chalicelib.constants.substitute_keys import from_db, to_db
from chalicelib.utils import db as utils_db, data as utils_data, exceptions
from chalicelib.utils.data import substitute_keys
from chalicelib.utils.logger import logger


class EntityBase:
    pk = None
    sk = None

    required_immutable_fields_validation: Dict[str, Callable] = {}
    required_mutable_fields_validation: Dict[str, Callable] = {}
    optional_fields_validation: Dict[str, Callable] = {}
    # mutable fields which are removed from the record when sent empty
    deletable_fields: List[str] = []
    updated_at_field = 'date_updated'

    def __init__(self, id_):
        self.id_: str = id_
        self.record_type: str = ''
        self.db_record: Dict = {}

    @staticmethod
    def request_body_to_db(request_body: Dict) -> Dict:
        body = dict(request_body)
        substitute_keys(dict_to_process=body, base_keys=to_db, nested=True)
        return body

    def _get_pk_sk(self) -> Tuple[str, str]:
        """
        Should be re-implemented in each child class
        :return:
        partkey, sortkey of db item for child
        """
        return self.pk, self.sk

    def _get_db_item(self) -> Dict:
        return utils_db.get_db_item(*self._get_pk_sk())

    def _reload(self) -> None:
        self.__init__(**self._get_db_item())

    def _to_dict(self) -> Dict:
        """
        Should be re-implemented in each child class
        :return:
        dict of item's attributes
        """
        return {
            'id_': self.id_
        }

    def _init_db_record(self) -> None:
        """
        New DB record initialization
        :return:
        None
        """
        pk, sk = self._get_pk_sk()
        self.db_record = {
            'partkey': pk,
            'sortkey': sk,
            'record_type': self.record_type,
            **{key: value for key, value in self._to_dict().items() if value is not None}
        }

    @staticmethod
    def _validate_fields(item: Dict, validation_dict: Dict[str, Callable], skip_empty: bool = False) -> None:
        for key, validator_func in validation_dict.items():
            value = item.get(key)
            if skip_empty and value is None:
                continue
            if validator_func(value) is False:
                message = f'Validation error occurred while validating the field={key}'
                logger.warning(f"_validate_fields ::: {message}, {value=}")
                raise exceptions.ValidationException(message)

    def _validate_mandatory_fields(self):
        """
        Validates mandatory fields if all fields have correct type to put to db
        Raise ValidationException in case if a field is not valid
        """
        self._validate_fields(self.db_record, {
            **self.required_immutable_fields_validation,
            **self.required_mutable_fields_validation
        })

    def _validate_optional_fields(self):
        """
        Optional fields may be absent, but a present value must be valid
        """
        self._validate_fields(self.db_record, self.optional_fields_validation, skip_empty=True)

    def _get_validated_update_dict(self) -> Dict:
        """
        Validates fields for update
        Empty fields stay in the dict so they get cleared, invalid fields are dropped
        :return:
        Clean dict for update
        """
        update_dict = self._to_dict()
        clean_dict = {}
        validation_dict = {**self.required_mutable_fields_validation, **self.optional_fields_validation}
        for key, value in update_dict.items():
            if key not in validation_dict or (value is None and key not in self.deletable_fields):
                continue
            if value is None or validation_dict[key](value) is True:
                clean_dict[key] = value
            else:
                logger.warning(f'_get_validated_update_dict ::: {key=}, {value=} is not valid, '
                               f'removing from update dict..')
        return clean_dict

    def _create_db_record(self) -> None:
        """
        Creates entity db record
        :return:
        None
        """
        self._init_db_record()
        self._validate_mandatory_fields()
        self._validate_optional_fields()
        utils_db.put_db_record(self.db_record)
        logger.info(f"_create_db_record ::: {self.record_type=} {self.id_=} {self.db_record.get('partkey')=} "
                    f"{self.db_record.get('sortkey')=} successfully created")

    def _update_fields_whitelist(self) -> List:
        return [*self.required_mutable_fields_validation.keys(), *self.optional_fields_validation.keys()]

    def _update_db_record(self):
        """
        Updates entity db record, last writer wins
        :return:
        None
        """
        pk, sk = self._get_pk_sk()
        setattr(self, self.updated_at_field, utils_data.get_timestamp())
        update_dict = self._get_validated_update_dict()
        utils_db.update_db_record(
            key={'partkey': pk, 'sortkey': sk},
            update_body=update_dict,
            allowed_attrs_to_update=self._update_fields_whitelist(),
            allowed_attrs_to_delete=self.deletable_fields
        )
        logger.info(f"_update_db_record ::: {self.record_type=} "
                    f"{self.id_=} {pk=} {sk=} successfully updated")

    def _to_ui(self) -> Dict[str, Any]:
        item = self._to_dict()
        substitute_keys(dict_to_process=item, base_keys=from_db, nested=True)
        return item
