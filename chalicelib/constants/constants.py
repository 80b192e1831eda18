# Order lifecycle, in the order a restaurant moves through it
ORDER_STATUSES = ('placed', 'paid', 'inProgress', 'outForDelivery', 'delivered')

IMAGE_FILE_FIELD = 'imageFile'
IMAGES_PREFIX = 'restaurants'
MAX_IMAGE_SIZE = 5 * 1024 * 1024
