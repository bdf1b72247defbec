"""Choice lists shared by the price tables and the analysis records"""

PRODUCT_TYPE_CHOICES = [
    ('ring', 'Ring'),
    ('necklace', 'Necklace'),
    ('pendant', 'Pendant'),
    ('bracelet', 'Bracelet'),
    ('earring', 'Earring'),
    ('brooch', 'Brooch'),
    ('bangle', 'Bangle'),
    ('chain', 'Chain'),
    ('solitaire', 'Solitaire'),
    ('fivestone', 'Five-stone'),
    ('set', 'Set'),
    ('other', 'Other'),
]

DIAMOND_SHAPES = ['Round', 'Princess', 'Cushion', 'Oval', 'Emerald', 'Pear', 'Marquise', 'Radiant', 'Asscher', 'Heart']
DIAMOND_COLORS = ['D', 'E', 'F', 'G', 'H', 'I', 'J', 'K', 'L', 'M']
DIAMOND_CLARITIES = ['FL', 'IF', 'VVS1', 'VVS2', 'VS1', 'VS2', 'SI1', 'SI2', 'I1', 'I2', 'I3']

GEMSTONE_TYPES = [
    'Safir', 'Zümrüt', 'Yakut', 'Ametist', 'Topaz', 'Akuamarin', 'Turmalin',
    'Peridot', 'Opal', 'Sitrin', 'Tanzanit', 'Morganit', 'Diğer',
]
GEMSTONE_QUALITIES = ['AAA', 'AA', 'A', 'B', 'C']

# Substrings that mark a stone type as diamond (English and Turkish)
DIAMOND_KEYWORDS = ('elmas', 'diamond', 'pırlanta')

STONE_CATEGORY_CHOICES = [
    ('diamond', 'Diamond'),
    ('colored', 'Colored stone'),
]

PRICING_TYPE_CHOICES = [
    ('per_stone', 'Per stone'),
    ('per_carat', 'Per carat'),
]
