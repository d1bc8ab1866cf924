from rgb_types import RGBColor

RED         = RGBColor(255,   0,   0)
ORANGE      = RGBColor(255, 149,   5)
CYAN        = RGBColor(  0, 200, 255)
PINK        = RGBColor(255, 105, 180)
DARK_GRAY   = RGBColor( 40,  40,  40)
BLACK       = RGBColor(  0,   0,   0)
